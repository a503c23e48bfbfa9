"""
Cascading reschedule of planned lessons.

When a planned lesson is displaced, every later planned lesson of the same
container moves with it so that teaching order and one-lesson-per-school-day
density are preserved. Completed lessons are never selected and never
re-dated.

Operations flush their changes on the session they are given; committing
or rolling back is up to the caller (see ``unit_of_work.transaction``).
"""

import logging
from collections import OrderedDict

from planner.models.lesson import Lesson, LessonStatus
from planner.scheduling.calendar import apply_bump_behavior, next_school_day, to_date

logger = logging.getLogger(__name__)


def planned_lessons_from(session, container_id, from_date):
    """Planned, dated lessons of a container on or after ``from_date``, in teaching order."""
    return (session.query(Lesson)
            .filter(Lesson.container_id == container_id,
                    Lesson.status == LessonStatus.PLANNED,
                    Lesson.scheduled_date.isnot(None),
                    Lesson.scheduled_date >= from_date)
            .order_by(Lesson.scheduled_date, Lesson.lesson_number)
            .all())


def _reassign(session, lessons, first_date, school_days):
    # Only the first lesson gets first_date; the rest follow on consecutive school days
    current = first_date
    for lesson in lessons:
        lesson.scheduled_date = current
        current = next_school_day(current, school_days)
    session.flush()
    return lessons


def bump_single(session, lesson_id, config):
    """
    Push one planned lesson, and everything after it, later in the calendar.

    The displaced lesson moves according to ``config.bump_behavior``; every
    following planned lesson of the container then takes the next school
    day after its predecessor.

    Args:
        session: Transactional handle shared by the whole cascade
        lesson_id: Lesson being bumped
        config: Resolved ScheduleConfig

    Returns:
        The re-dated lessons in their new order (empty when nothing moved).
    """
    lesson = session.get(Lesson, lesson_id)
    if lesson is None or not lesson.is_planned or lesson.scheduled_date is None:
        logger.debug(f"Nothing to bump for lesson {lesson_id}")
        return []

    affected = planned_lessons_from(session, lesson.container_id, lesson.scheduled_date)
    first_date = apply_bump_behavior(lesson.scheduled_date, config.bump_behavior, config.school_days)
    _reassign(session, affected, first_date, config.school_days)
    logger.info(f"Bumped {len(affected)} lessons in container {lesson.container_id} "
                f"starting at lesson {lesson.lesson_number} -> {first_date}")
    return affected


def bump_all_for_date(session, day, config, scope=None):
    """
    Move every planned lesson on ``day`` to the next school day, cascading per container.

    Used for sick days and absences. This path always advances by plain
    next school day, regardless of the configured bump behavior.

    Args:
        session: Transactional handle shared by all cascades
        day: Date whose lessons are displaced
        config: Resolved ScheduleConfig
        scope: Container ids to consider, or None for every container
            with a planned lesson on ``day``

    Returns:
        OrderedDict mapping container id to the lessons it re-dated.
    """
    day = to_date(day)
    results = OrderedDict()
    if scope is not None:
        scope = set(scope)
        if not scope:
            return results

    query = (session.query(Lesson.container_id)
             .filter(Lesson.status == LessonStatus.PLANNED,
                     Lesson.scheduled_date == day)
             .distinct())
    if scope is not None:
        query = query.filter(Lesson.container_id.in_(scope))
    container_ids = sorted(container_id for (container_id,) in query)

    first_date = next_school_day(day, config.school_days)
    for container_id in container_ids:
        affected = planned_lessons_from(session, container_id, day)
        results[container_id] = _reassign(session, affected, first_date, config.school_days)
        logger.info(f"Cascaded {len(affected)} lessons in container {container_id} off {day}")

    if not container_ids:
        logger.debug(f"No planned lessons to move on {day}")
    return results
