"""
Shared fixtures: an app on an in-memory SQLite store plus data builders.
"""

from datetime import date

import pytest

from planner.extensions import db
from planner.main import create_app
from planner.models.absence import AbsenceReason
from planner.models.curriculum import Resource, SharedCurriculum
from planner.models.lesson import Lesson, LessonStatus
from planner.models.student import Student, Subject
from planner.scheduling.config import BumpBehavior, ScheduleConfig

WEEKDAYS = {1, 2, 3, 4, 5}


class Builder:
    """Creates and flushes model rows for tests."""

    def __init__(self, session):
        self.session = session

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def student(self, name="Ada"):
        return self._add(Student(name=name, color="rose"))

    def resource(self, student=None, name="Math 1", subject_name="Math"):
        student = student or self.student()
        subject = self._add(Subject(name=subject_name, student_id=student.id))
        return self._add(Resource(name=name, subject_id=subject.id))

    def shared(self, *students, name="Nature Study"):
        curriculum = SharedCurriculum(name=name)
        curriculum.students.extend(students)
        return self._add(curriculum)

    def lesson(self, container, number, scheduled=None, status=LessonStatus.PLANNED, completed_on=None):
        return self._add(Lesson(
            container_id=container.id,
            lesson_number=number,
            title=f"Lesson {number}",
            status=status,
            scheduled_date=scheduled,
            completion_date=completed_on,
        ))

    def lessons(self, container, *dates):
        return [self.lesson(container, number, scheduled)
                for number, scheduled in enumerate(dates, start=1)]

    def reason(self, name="Sick", counts_as_present=False):
        return self._add(AbsenceReason(name=name, color="red", counts_as_present=counts_as_present))


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def build(session):
    return Builder(session)


@pytest.fixture
def config():
    return ScheduleConfig(school_days=WEEKDAYS, bump_behavior=BumpBehavior.NEXT_SCHOOL_DAY)


@pytest.fixture
def next_week_config():
    return ScheduleConfig(school_days=WEEKDAYS, bump_behavior=BumpBehavior.SAME_DAY_NEXT_WEEK)


def d(day, month=1, year=2024):
    """Shorthand for dates in January 2024 (the 1st is a Monday)."""
    return date(year, month, day)
