"""Batch creation of dated lessons for a container."""

import logging

from planner.models.lesson import Lesson, LessonStatus
from planner.scheduling.calendar import generate_sequence, to_date
from planner.scheduling.errors import LessonRangeError

logger = logging.getLogger(__name__)


def default_title(lesson_number):
    return f"Lesson {lesson_number}"


def batch_assign(session, container_id, start_number, end_number, start_date, school_days):
    """
    Create the missing lessons ``start_number..end_number`` with school-day dates.

    Lesson number ``start_number + i`` owns the i-th date of the generated
    sequence. Numbers already present in the container are left untouched
    and their date slot stays unused, so re-running a range never
    duplicates lessons or double-books a day.

    Args:
        session: Transactional handle (SQLAlchemy session), never committed here
        container_id: Resource or shared curriculum receiving the lessons
        start_number: First lesson number (inclusive)
        end_number: Last lesson number (inclusive)
        start_date: First candidate date
        school_days: Weekday numbers lessons may fall on

    Returns:
        The newly created lessons, in lesson-number order.

    Raises:
        LessonRangeError: if ``end_number < start_number``
    """
    if end_number < start_number or start_number < 1:
        raise LessonRangeError(start_number, end_number)
    start_date = to_date(start_date)

    count = end_number - start_number + 1
    dates = generate_sequence(start_date, count, school_days)

    existing_numbers = {
        number for (number,) in session.query(Lesson.lesson_number)
        .filter(Lesson.container_id == container_id,
                Lesson.lesson_number.between(start_number, end_number))
    }

    new_lessons = []
    for offset, number in enumerate(range(start_number, end_number + 1)):
        if number in existing_numbers:
            continue
        new_lessons.append(Lesson(
            container_id=container_id,
            lesson_number=number,
            title=default_title(number),
            status=LessonStatus.PLANNED,
            scheduled_date=dates[offset],
        ))

    if new_lessons:
        session.add_all(new_lessons)
        session.flush()
        logger.info(f"Created {len(new_lessons)} lessons in container {container_id} "
                    f"starting {new_lessons[0].scheduled_date}")
    else:
        logger.debug(f"Lessons {start_number}..{end_number} already exist in container {container_id}")
    return new_lessons
