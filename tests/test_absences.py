"""
Tests for absence logging and the cascades it triggers.
"""

from dataclasses import replace

from conftest import d
from planner.models.absence import Absence, AbsenceReason
from planner.models.lesson import Lesson, LessonStatus
from planner.scheduling.absences import (
    create_absence_reason, delete_absence_reason, log_absence, log_absence_for_all,
    remove_absence, reorder_absence_reasons, student_container_ids, students_with_planned_lessons,
)


def planned_dates(session, container):
    lessons = (session.query(Lesson)
               .filter_by(container_id=container.id, status=LessonStatus.PLANNED)
               .order_by(Lesson.lesson_number).all())
    return [lesson.scheduled_date for lesson in lessons]


def absences_for(session, student):
    return session.query(Absence).filter_by(student_id=student.id).all()


class TestLogAbsence:
    """A single student's absence."""

    def test_cascades_each_container_once(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        reading = build.resource(ada, name="Reading", subject_name="Reading")
        build.lessons(math, d(5), d(8))
        build.lessons(reading, d(5), d(8), d(9))
        sick = build.reason()

        outcome = log_absence(session, ada.id, d(5), sick.id, config)

        assert outcome.created
        assert sorted(outcome.cascades) == sorted([math.id, reading.id])
        assert planned_dates(session, math) == [d(8), d(9)]
        assert planned_dates(session, reading) == [d(8), d(9), d(10)]
        assert len(absences_for(session, ada)) == 1

    def test_other_students_untouched(self, session, build, config):
        ada, ben = build.student("Ada"), build.student("Ben")
        ada_math = build.resource(ada)
        ben_math = build.resource(ben)
        build.lessons(ada_math, d(5))
        build.lessons(ben_math, d(5))

        log_absence(session, ada.id, d(5), build.reason().id, config)

        assert planned_dates(session, ada_math) == [d(8)]
        assert planned_dates(session, ben_math) == [d(5)]

    def test_uses_next_school_day_even_when_configured_otherwise(self, session, build, next_week_config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5), d(8))

        log_absence(session, ada.id, d(5), build.reason().id, next_week_config)

        assert planned_dates(session, math) == [d(8), d(9)]

    def test_second_log_overwrites_reason(self, session, build, config):
        ada = build.student()
        sick, vacation = build.reason("Sick"), build.reason("Vacation")

        log_absence(session, ada.id, d(5), sick.id, config)
        outcome = log_absence(session, ada.id, d(5), vacation.id, config)

        (absence,) = absences_for(session, ada)
        assert not outcome.created
        assert absence.reason_id == vacation.id

    def test_reason_counting_as_present_keeps_lessons(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5))
        field_trip = build.reason("Field Trip", counts_as_present=True)

        outcome = log_absence(session, ada.id, d(5), field_trip.id, config)

        assert outcome.cascades == {}
        assert planned_dates(session, math) == [d(5)]
        assert len(absences_for(session, ada)) == 1

    def test_auto_bump_disabled_keeps_lessons(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5))

        log_absence(session, ada.id, d(5), build.reason().id, replace(config, absence_auto_bump=False))

        assert planned_dates(session, math) == [d(5)]
        assert len(absences_for(session, ada)) == 1

    def test_completed_lessons_untouched(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        done = build.lesson(math, 1, d(5), status=LessonStatus.COMPLETED, completed_on=d(5))
        planned = build.lesson(math, 2, d(5))

        log_absence(session, ada.id, d(5), build.reason().id, config)

        assert (done.scheduled_date, done.completion_date) == (d(5), d(5))
        assert planned.scheduled_date == d(8)

    def test_accepts_iso_date_strings(self, session, build, config):
        ada = build.student()

        outcome = log_absence(session, ada.id, "2024-01-05", build.reason().id, config)

        assert outcome.absence.date == d(5)


class TestSharedCurricula:
    """Shared curricula move only when every member is absent."""

    def test_one_member_absent_keeps_shared_lessons(self, session, build, config):
        ada, ben = build.student("Ada"), build.student("Ben")
        nature = build.shared(ada, ben)
        build.lessons(nature, d(5))

        log_absence(session, ada.id, d(5), build.reason().id, config)

        assert planned_dates(session, nature) == [d(5)]

    def test_all_members_absent_moves_shared_lessons(self, session, build, config):
        ada, ben = build.student("Ada"), build.student("Ben")
        nature = build.shared(ada, ben)
        build.lessons(nature, d(5), d(8))
        sick = build.reason()

        log_absence(session, ada.id, d(5), sick.id, config)
        log_absence(session, ben.id, d(5), sick.id, config)

        assert planned_dates(session, nature) == [d(8), d(9)]

    def test_container_scope(self, session, build):
        ada, ben = build.student("Ada"), build.student("Ben")
        math = build.resource(ada)
        solo = build.shared(ada, name="Piano")
        build.shared(ada, ben, name="Nature")
        session.add(Absence(student_id=ada.id, date=d(5), reason_id=build.reason().id))
        session.flush()

        assert student_container_ids(session, ada.id, d(5)) == {math.id, solo.id}


class TestLogAbsenceForAll:
    """Marking everyone absent for a day."""

    def test_discovers_students_with_planned_lessons(self, session, build):
        ada, ben, cy = build.student("Ada"), build.student("Ben"), build.student("Cy")
        build.lessons(build.resource(ada), d(5))
        build.lessons(build.shared(ben), d(5))
        build.lessons(build.resource(cy), d(8))

        assert students_with_planned_lessons(session, d(5)) == sorted([ada.id, ben.id])

    def test_records_and_cascades_every_student(self, session, build, config):
        ada, ben = build.student("Ada"), build.student("Ben")
        ada_math, ben_math = build.resource(ada), build.resource(ben)
        nature = build.shared(ada, ben)
        build.lessons(ada_math, d(5), d(8))
        build.lessons(ben_math, d(5))
        build.lessons(nature, d(5), d(8))
        sick = build.reason()

        outcomes = log_absence_for_all(session, d(5), sick.id, config)

        assert [outcome.absence.student_id for outcome in outcomes] == sorted([ada.id, ben.id])
        assert all(outcome.created for outcome in outcomes)
        assert planned_dates(session, ada_math) == [d(8), d(9)]
        assert planned_dates(session, ben_math) == [d(8)]
        assert planned_dates(session, nature) == [d(8), d(9)]

    def test_existing_reason_is_preserved_but_lessons_still_move(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5))
        vacation, sick = build.reason("Vacation"), build.reason("Sick")
        session.add(Absence(student_id=ada.id, date=d(5), reason_id=vacation.id))
        session.flush()

        (outcome,) = log_absence_for_all(session, d(5), sick.id, config)

        assert not outcome.created
        assert outcome.absence.reason_id == vacation.id
        assert planned_dates(session, math) == [d(8)]

    def test_existing_present_absence_still_cascades_under_new_reason(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5), d(8))
        field_trip, sick = build.reason("Field Trip", counts_as_present=True), build.reason("Sick")
        session.add(Absence(student_id=ada.id, date=d(5), reason_id=field_trip.id))
        session.flush()

        (outcome,) = log_absence_for_all(session, d(5), sick.id, config)

        assert outcome.absence.reason_id == field_trip.id
        assert list(outcome.cascades) == [math.id]
        assert planned_dates(session, math) == [d(8), d(9)]

    def test_students_without_lessons_get_no_absence(self, session, build, config):
        ada, ben = build.student("Ada"), build.student("Ben")
        build.lessons(build.resource(ada), d(5))

        log_absence_for_all(session, d(5), build.reason().id, config)

        assert len(absences_for(session, ada)) == 1
        assert absences_for(session, ben) == []


class TestRemoveAbsence:
    """Removing an absence never moves lessons back."""

    def test_deletes_record_only(self, session, build, config):
        ada = build.student()
        math = build.resource(ada)
        build.lessons(math, d(5))
        outcome = log_absence(session, ada.id, d(5), build.reason().id, config)

        assert remove_absence(session, outcome.absence.id) is True
        assert absences_for(session, ada) == []
        assert planned_dates(session, math) == [d(8)]

    def test_unknown_absence_is_a_noop(self, session):
        assert remove_absence(session, 4242) is False


class TestAbsenceReasons:
    """Absence reason maintenance."""

    def test_defaults_seeded_once(self, session):
        reasons = AbsenceReason.ensure_defaults(session)
        again = AbsenceReason.ensure_defaults(session)

        assert [reason.name for reason in reasons] == ["Sick", "Vacation", "Appointment", "Field Trip"]
        assert [reason.counts_as_present for reason in reasons] == [False, False, False, True]
        assert len(again) == 4

    def test_new_reason_appended(self, session):
        AbsenceReason.ensure_defaults(session)

        reason = create_absence_reason(session, "  Co-op  ", "teal")

        assert reason.name == "Co-op"
        assert reason.sort_order == 4

    def test_reorder(self, session, build):
        first, second = build.reason("Sick"), build.reason("Vacation")

        reasons = reorder_absence_reasons(session, [second.id, first.id])

        assert [reason.name for reason in reasons] == ["Vacation", "Sick"]

    def test_delete(self, session, build):
        reason = build.reason()

        assert delete_absence_reason(session, reason.id) is True
        assert delete_absence_reason(session, reason.id) is False
