# planner/models/lesson.py

import enum

from planner.extensions import db


class LessonStatus(str, enum.Enum):
    PLANNED = 'planned'
    COMPLETED = 'completed'


class Lesson(db.Model):
    __tablename__ = 'lessons'
    id = db.Column(db.Integer, primary_key=True)
    container_id = db.Column(db.Integer, db.ForeignKey('containers.id'), nullable=False, index=True)
    lesson_number = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(255), nullable=True)
    status = db.Column(
        db.Enum(LessonStatus, name='lesson_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LessonStatus.PLANNED,
    )
    scheduled_date = db.Column(db.Date, nullable=True, index=True)
    completion_date = db.Column(db.Date, nullable=True)
    plan = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('container_id', 'lesson_number', name='uq_lesson_container_number'),
        db.CheckConstraint('lesson_number > 0', name='ck_lesson_number_positive'),
        db.Index('ix_lessons_scheduled_date_status', 'scheduled_date', 'status'),
    )

    @property
    def is_planned(self):
        return self.status == LessonStatus.PLANNED

    def to_dict(self):
        return {
            "id": self.id,
            "container_id": self.container_id,
            "lesson_number": self.lesson_number,
            "title": self.title,
            "status": self.status.value,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "plan": self.plan,
            "notes": self.notes,
        }

    def __repr__(self):
        return f'<Lesson {self.lesson_number} of container {self.container_id}>'
