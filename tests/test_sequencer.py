"""
Tests for batch lesson creation.
"""

import pytest

from conftest import WEEKDAYS, d
from planner.models.lesson import Lesson, LessonStatus
from planner.scheduling.errors import LessonRangeError
from planner.scheduling.sequencer import batch_assign


def lessons_of(session, container):
    return (session.query(Lesson).filter_by(container_id=container.id)
            .order_by(Lesson.lesson_number).all())


class TestBatchAssign:
    """Pre-populating a container with dated lessons."""

    def test_creates_dated_lessons(self, session, build):
        resource = build.resource()

        created = batch_assign(session, resource.id, 1, 3, d(1), WEEKDAYS)

        assert [lesson.lesson_number for lesson in created] == [1, 2, 3]
        assert [lesson.scheduled_date for lesson in created] == [d(1), d(2), d(3)]
        assert all(lesson.status == LessonStatus.PLANNED for lesson in created)
        assert [lesson.title for lesson in created] == ["Lesson 1", "Lesson 2", "Lesson 3"]

    def test_skips_non_school_days(self, session, build):
        resource = build.resource()

        created = batch_assign(session, resource.id, 1, 4, d(1), {1, 3, 5})

        assert [lesson.scheduled_date for lesson in created] == [d(1), d(3), d(5), d(8)]

    def test_weekend_start_begins_on_monday(self, session, build):
        resource = build.resource()

        created = batch_assign(session, resource.id, 5, 6, d(6), WEEKDAYS)

        assert [(l.lesson_number, l.scheduled_date) for l in created] == [(5, d(8)), (6, d(9))]

    def test_second_run_is_idempotent(self, session, build):
        resource = build.resource()

        batch_assign(session, resource.id, 1, 10, d(1), WEEKDAYS)
        again = batch_assign(session, resource.id, 1, 10, d(1), WEEKDAYS)

        lessons = lessons_of(session, resource)
        assert again == []
        assert len(lessons) == 10
        assert [l.scheduled_date for l in lessons] == [
            d(1), d(2), d(3), d(4), d(5), d(8), d(9), d(10), d(11), d(12)]

    def test_existing_lessons_keep_their_date_and_slot(self, session, build):
        resource = build.resource()
        existing = build.lesson(resource, 3, d(1, month=2))
        existing.title = "Fractions"

        created = batch_assign(session, resource.id, 1, 5, d(1), WEEKDAYS)

        assert [(l.lesson_number, l.scheduled_date) for l in created] == [
            (1, d(1)), (2, d(2)), (4, d(4)), (5, d(5))]
        assert existing.scheduled_date == d(1, month=2)
        assert existing.title == "Fractions"
        assert len(lessons_of(session, resource)) == 5

    def test_reversed_range_rejected_before_writing(self, session, build):
        resource = build.resource()

        with pytest.raises(LessonRangeError):
            batch_assign(session, resource.id, 5, 4, d(1), WEEKDAYS)

        assert lessons_of(session, resource) == []

    def test_single_lesson_range(self, session, build):
        resource = build.resource()

        created = batch_assign(session, resource.id, 7, 7, d(2), WEEKDAYS)

        assert [(l.lesson_number, l.scheduled_date, l.title) for l in created] == [(7, d(2), "Lesson 7")]

    def test_other_containers_untouched(self, session, build):
        student = build.student()
        math = build.resource(student, name="Math")
        reading = build.resource(student, name="Reading", subject_name="Reading")
        build.lessons(reading, d(1), d(2))

        batch_assign(session, math.id, 1, 2, d(1), WEEKDAYS)

        assert [l.scheduled_date for l in lessons_of(session, reading)] == [d(1), d(2)]
        assert len(lessons_of(session, math)) == 2
