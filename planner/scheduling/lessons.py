"""Single-lesson operations: creation, completion, manual moves and make-up days."""

import logging
from datetime import date

from sqlalchemy import func

from planner.models.curriculum import Resource
from planner.models.lesson import Lesson, LessonStatus
from planner.models.student import Subject
from planner.scheduling.calendar import to_date
from planner.scheduling.errors import DuplicateLessonError, LessonRangeError
from planner.scheduling.sequencer import default_title

logger = logging.getLogger(__name__)


def _clean(text):
    if text is None:
        return None
    return text.strip() or None


def create_lesson(session, container_id, lesson_number, title=None, scheduled_date=None, plan=None):
    if lesson_number < 1:
        raise LessonRangeError(lesson_number, lesson_number)
    exists = (session.query(Lesson.id)
              .filter_by(container_id=container_id, lesson_number=lesson_number)
              .first())
    if exists:
        raise DuplicateLessonError(container_id, lesson_number)

    lesson = Lesson(
        container_id=container_id,
        lesson_number=lesson_number,
        title=_clean(title) or default_title(lesson_number),
        status=LessonStatus.PLANNED,
        scheduled_date=to_date(scheduled_date) if scheduled_date else None,
        plan=_clean(plan),
    )
    session.add(lesson)
    session.flush()
    return lesson


def complete_lesson(session, lesson_id, on=None):
    lesson = session.get(Lesson, lesson_id)
    if lesson is None:
        return None
    lesson.status = LessonStatus.COMPLETED
    lesson.completion_date = to_date(on) if on else date.today()
    session.flush()
    return lesson


def uncomplete_lesson(session, lesson_id):
    lesson = session.get(Lesson, lesson_id)
    if lesson is None:
        return None
    lesson.status = LessonStatus.PLANNED
    lesson.completion_date = None
    session.flush()
    return lesson


def bulk_complete_lessons(session, lesson_ids, on=None):
    ids = sorted({lesson_id for lesson_id in lesson_ids if lesson_id})
    if not ids:
        return []
    completed_on = to_date(on) if on else date.today()
    lessons = session.query(Lesson).filter(Lesson.id.in_(ids)).order_by(Lesson.id).all()
    for lesson in lessons:
        lesson.status = LessonStatus.COMPLETED
        lesson.completion_date = completed_on
    session.flush()
    logger.info(f"Completed {len(lessons)} lessons on {completed_on}")
    return lessons


def reschedule_lesson(session, lesson_id, new_date):
    """
    Move one planned lesson to a chosen date without cascading.

    ``new_date=None`` unschedules it. Completed lessons are left alone.
    """
    lesson = session.get(Lesson, lesson_id)
    if lesson is None or not lesson.is_planned:
        return None
    lesson.scheduled_date = to_date(new_date) if new_date else None
    session.flush()
    return lesson


def schedule_makeup_lesson(session, container_id, day, title=None, notes=None):
    """
    Fill ``day`` with the container's next planned lesson.

    The earliest planned lesson dated after ``day`` is pulled forward onto
    it; when there is none a new lesson is appended to the container.
    """
    day = to_date(day)
    next_lesson = (session.query(Lesson)
                   .filter(Lesson.container_id == container_id,
                           Lesson.status == LessonStatus.PLANNED,
                           Lesson.scheduled_date > day)
                   .order_by(Lesson.scheduled_date, Lesson.lesson_number)
                   .first())
    if next_lesson is not None:
        next_lesson.scheduled_date = day
        if _clean(title):
            next_lesson.title = _clean(title)
        if notes is not None:
            next_lesson.notes = _clean(notes)
        session.flush()
        logger.info(f"Pulled lesson {next_lesson.lesson_number} of container {container_id} forward to {day}")
        return next_lesson

    max_number = (session.query(func.max(Lesson.lesson_number))
                  .filter(Lesson.container_id == container_id)
                  .scalar()) or 0
    lesson = Lesson(
        container_id=container_id,
        lesson_number=max_number + 1,
        title=_clean(title) or default_title(max_number + 1),
        status=LessonStatus.PLANNED,
        scheduled_date=day,
        notes=_clean(notes),
    )
    session.add(lesson)
    session.flush()
    logger.info(f"Added make-up lesson {lesson.lesson_number} to container {container_id} on {day}")
    return lesson


def upcoming_planned_lessons(session, student_id, after, limit=30):
    after = to_date(after)
    return (session.query(Lesson)
            .join(Resource, Lesson.container_id == Resource.id)
            .join(Subject, Resource.subject_id == Subject.id)
            .filter(Subject.student_id == student_id,
                    Lesson.status == LessonStatus.PLANNED,
                    Lesson.scheduled_date > after)
            .order_by(Lesson.scheduled_date, Subject.name, Lesson.lesson_number)
            .limit(limit)
            .all())
