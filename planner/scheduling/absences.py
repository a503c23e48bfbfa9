"""
Absence logging and the cascades it triggers.

An absence keeps a student's lessons for that day from happening, so the
planned lessons of every container that student follows are bumped with
``bump_all_for_date``. Removing an absence never moves lessons back.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import func

from planner.models.absence import Absence, AbsenceReason
from planner.models.curriculum import Resource, SharedCurriculum, shared_curriculum_students
from planner.models.lesson import Lesson, LessonStatus
from planner.models.student import Student, Subject
from planner.scheduling.calendar import to_date
from planner.scheduling.cascade import bump_all_for_date

logger = logging.getLogger(__name__)


@dataclass
class AbsenceOutcome:
    absence: Absence
    created: bool
    cascades: Dict[int, List[Lesson]] = field(default_factory=dict)

    @property
    def moved_lessons(self):
        return [lesson for lessons in self.cascades.values() for lesson in lessons]


def _should_cascade(config, reason: Optional[AbsenceReason]):
    if not config.absence_auto_bump:
        return False
    return not (reason is not None and reason.counts_as_present)


def student_container_ids(session, student_id, day):
    """
    Containers an absence of ``student_id`` on ``day`` displaces.

    That is every resource of the student, plus each shared curriculum the
    student follows whose members are all absent that day.
    """
    resource_ids = {
        resource_id for (resource_id,) in session.query(Resource.id)
        .join(Subject, Resource.subject_id == Subject.id)
        .filter(Subject.student_id == student_id)
    }

    shared = (session.query(SharedCurriculum)
              .filter(SharedCurriculum.students.any(Student.id == student_id))
              .all())
    if shared:
        absent = {sid for (sid,) in session.query(Absence.student_id).filter(Absence.date == day)}
        resource_ids.update(curriculum.id for curriculum in shared
                            if set(curriculum.student_ids) <= absent)
    return resource_ids


def students_with_planned_lessons(session, day):
    """Distinct ids of students with at least one planned lesson on ``day``."""
    planned_on_day = (Lesson.status == LessonStatus.PLANNED, Lesson.scheduled_date == day)
    through_resources = (session.query(Subject.student_id)
                         .join(Resource, Resource.subject_id == Subject.id)
                         .join(Lesson, Lesson.container_id == Resource.id)
                         .filter(*planned_on_day))
    through_shared = (session.query(shared_curriculum_students.c.student_id)
                      .join(Lesson, Lesson.container_id == shared_curriculum_students.c.shared_curriculum_id)
                      .filter(*planned_on_day))
    ids = {sid for (sid,) in through_resources} | {sid for (sid,) in through_shared}
    return sorted(ids)


def _find_absence(session, student_id, day):
    return session.query(Absence).filter_by(student_id=student_id, date=day).first()


def _cascade_for_student(session, student_id, day, reason, config):
    if not _should_cascade(config, reason):
        logger.debug(f"Absence of student {student_id} on {day} does not move lessons")
        return {}
    scope = student_container_ids(session, student_id, day)
    return bump_all_for_date(session, day, config, scope=scope)


def log_absence(session, student_id, day, reason_id, config):
    """
    Record (or re-reason) a student's absence and bump their lessons for that day.

    An existing absence for the same student and date has its reason
    overwritten.
    """
    day = to_date(day)
    absence = _find_absence(session, student_id, day)
    created = absence is None
    if created:
        absence = Absence(student_id=student_id, date=day, reason_id=reason_id)
        session.add(absence)
    else:
        absence.reason_id = reason_id
    session.flush()
    logger.info(f"{'Logged' if created else 'Updated'} absence of student {student_id} on {day}")

    reason = session.get(AbsenceReason, reason_id)
    cascades = _cascade_for_student(session, student_id, day, reason, config)
    return AbsenceOutcome(absence=absence, created=created, cascades=cascades)


def log_absence_for_all(session, day, reason_id, config):
    """
    Mark every student with planned lessons on ``day`` absent and bump their lessons.

    Unlike ``log_absence`` an absence that already exists keeps its reason,
    but its lessons are still cascaded as ``reason_id`` dictates. All
    absences are recorded before any cascade runs so shared curricula see
    every member as absent.
    """
    day = to_date(day)
    outcomes = []
    for student_id in students_with_planned_lessons(session, day):
        absence = _find_absence(session, student_id, day)
        created = absence is None
        if created:
            absence = Absence(student_id=student_id, date=day, reason_id=reason_id)
            session.add(absence)
        outcomes.append(AbsenceOutcome(absence=absence, created=created))
    session.flush()

    reason = session.get(AbsenceReason, reason_id)
    for outcome in outcomes:
        outcome.cascades = _cascade_for_student(session, outcome.absence.student_id, day, reason, config)
    logger.info(f"Logged absence for {len(outcomes)} students on {day}")
    return outcomes


def remove_absence(session, absence_id):
    """Delete an absence record. Lessons it displaced stay where they are."""
    absence = session.get(Absence, absence_id)
    if absence is None:
        logger.debug(f"Absence {absence_id} not found, nothing to remove")
        return False
    session.delete(absence)
    session.flush()
    logger.info(f"Removed absence {absence_id}")
    return True


# --- Absence reasons --- #

def create_absence_reason(session, name, color, counts_as_present=False):
    max_sort = session.query(func.max(AbsenceReason.sort_order)).scalar()
    reason = AbsenceReason(
        name=name.strip(),
        color=color,
        counts_as_present=counts_as_present,
        sort_order=0 if max_sort is None else max_sort + 1,
    )
    session.add(reason)
    session.flush()
    return reason


def reorder_absence_reasons(session, ordered_ids):
    reasons = {reason.id: reason for reason in
               session.query(AbsenceReason).filter(AbsenceReason.id.in_(ordered_ids))}
    for index, reason_id in enumerate(ordered_ids):
        if reason_id in reasons:
            reasons[reason_id].sort_order = index
    session.flush()
    return AbsenceReason.ordered(session)


def delete_absence_reason(session, reason_id):
    reason = session.get(AbsenceReason, reason_id)
    if reason is None:
        return False
    session.delete(reason)
    session.flush()
    return True
