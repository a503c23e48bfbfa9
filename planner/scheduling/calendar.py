"""
School-day calendar helpers.

Weekdays are numbered 0=Sunday ... 6=Saturday. All functions are pure and
work on ``datetime.date`` values; an empty school-day set is rejected
rather than silently replaced with a default.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List

from planner.scheduling.config import BumpBehavior, normalize_school_days
from planner.scheduling.errors import InvalidDateError, InvalidScheduleConfigError

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)


def to_date(value) -> date:
    """
    Coerce a date argument, rejecting anything that is not a calendar date.

    Accepts ``datetime.date`` instances and ISO ``YYYY-MM-DD`` strings.

    Examples:
        >>> to_date("2024-01-05")
        datetime.date(2024, 1, 5)
    """
    # datetime is a date subclass but carries a time we must not drop silently
    if isinstance(value, datetime):
        raise InvalidDateError(f"Expected a date, got a datetime: {value!r}")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass
        raise InvalidDateError(f"Malformed date {value!r}, expected YYYY-MM-DD")
    raise InvalidDateError(f"Expected a date, got {type(value).__name__}")


def weekday_number(day: date) -> int:
    """Weekday of ``day`` with Sunday as 0."""
    return day.isoweekday() % 7


def _school_days(school_days: Iterable[int]):
    days = normalize_school_days(school_days)
    if not days:
        raise InvalidScheduleConfigError("School days must not be empty")
    return days


def is_school_day(day, school_days: Iterable[int]) -> bool:
    return weekday_number(to_date(day)) in _school_days(school_days)


def next_school_day(day, school_days: Iterable[int]) -> date:
    """The first school day strictly after ``day``."""
    days = _school_days(school_days)
    current = to_date(day) + ONE_DAY
    while weekday_number(current) not in days:
        current += ONE_DAY
    return current


def generate_sequence(start, count: int, school_days: Iterable[int]) -> List[date]:
    """
    Generate ``count`` consecutive school days.

    The sequence starts with ``start`` when it is itself a school day,
    otherwise with the first school day after it.
    """
    days = _school_days(school_days)
    current = to_date(start)
    if count <= 0:
        return []
    if weekday_number(current) not in days:
        current = next_school_day(current, days)
    dates = [current]
    while len(dates) < count:
        current = next_school_day(current, days)
        dates.append(current)
    return dates


def same_weekday_next_week(day) -> date:
    return to_date(day) + ONE_WEEK


def apply_bump_behavior(day, behavior, school_days: Iterable[int]) -> date:
    """Date a displaced lesson moves to under the configured bump behavior."""
    if BumpBehavior(behavior) is BumpBehavior.SAME_DAY_NEXT_WEEK:
        return same_weekday_next_week(day)
    return next_school_day(day, school_days)
