"""
Resolved scheduling configuration.

The engine never looks settings up on its own: callers build a
``ScheduleConfig`` (usually through ``AppSetting.resolve_schedule_config``)
and hand it to every operation that needs one.
"""

import enum
from dataclasses import dataclass, field
from typing import FrozenSet

from planner.scheduling.errors import InvalidScheduleConfigError

# 0=Sunday ... 6=Saturday
WEEKDAYS = frozenset(range(7))
DEFAULT_SCHOOL_DAYS = frozenset({1, 2, 3, 4, 5})


class BumpBehavior(str, enum.Enum):
    NEXT_SCHOOL_DAY = 'next_school_day'
    SAME_DAY_NEXT_WEEK = 'same_day_next_week'


def normalize_school_days(days) -> FrozenSet[int]:
    """
    Validate weekday numbers and return them as a frozenset.

    Args:
        days: Iterable of weekday numbers (0=Sun ... 6=Sat)

    Raises:
        InvalidScheduleConfigError: if a value is not an int in 0..6
    """
    try:
        values = list(days)
    except TypeError:
        raise InvalidScheduleConfigError(f"School days must be a collection, got {days!r}")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value not in WEEKDAYS:
            raise InvalidScheduleConfigError(f"Invalid weekday number: {value!r}")
    return frozenset(values)


@dataclass(frozen=True)
class ScheduleConfig:
    school_days: FrozenSet[int] = DEFAULT_SCHOOL_DAYS
    bump_behavior: BumpBehavior = BumpBehavior.NEXT_SCHOOL_DAY
    absence_auto_bump: bool = True
    default_lesson_count: int = field(default=20, compare=False)

    def __post_init__(self):
        school_days = normalize_school_days(self.school_days)
        if not school_days:
            raise InvalidScheduleConfigError("At least one school day is required")
        try:
            behavior = BumpBehavior(self.bump_behavior)
        except ValueError:
            raise InvalidScheduleConfigError(f"Unknown bump behavior: {self.bump_behavior!r}")
        # frozen dataclass: assign the normalized values through object
        object.__setattr__(self, 'school_days', school_days)
        object.__setattr__(self, 'bump_behavior', behavior)

    def to_dict(self):
        return {
            "school_days": sorted(self.school_days),
            "bump_behavior": self.bump_behavior.value,
            "absence_auto_bump": self.absence_auto_bump,
            "default_lesson_count": self.default_lesson_count,
        }
