# planner/models/absence.py

from planner.extensions import db

DEFAULT_ABSENCE_REASONS = [
    {"name": "Sick", "color": "red", "sort_order": 0, "counts_as_present": False},
    {"name": "Vacation", "color": "blue", "sort_order": 1, "counts_as_present": False},
    {"name": "Appointment", "color": "amber", "sort_order": 2, "counts_as_present": False},
    {"name": "Field Trip", "color": "emerald", "sort_order": 3, "counts_as_present": True},
]


class AbsenceReason(db.Model):
    __tablename__ = 'absence_reasons'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(20), nullable=False)
    # Reasons such as a field trip record the day without moving lessons
    counts_as_present = db.Column(db.Boolean, default=False, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    absences = db.relationship('Absence', backref='reason', lazy=True, cascade="all, delete-orphan")

    def __repr__(self):
        return f'<AbsenceReason {self.name}>'

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "counts_as_present": self.counts_as_present,
            "sort_order": self.sort_order,
        }

    @staticmethod
    def ordered(session):
        return (session.query(AbsenceReason)
                .order_by(AbsenceReason.sort_order, AbsenceReason.name)
                .all())

    @staticmethod
    def ensure_defaults(session):
        """
        Seed the default reasons when none exist yet.

        Returns the reasons ordered for display.
        """
        if session.query(AbsenceReason).count() == 0:
            session.add_all(AbsenceReason(**values) for values in DEFAULT_ABSENCE_REASONS)
            session.flush()
        return AbsenceReason.ordered(session)


class Absence(db.Model):
    __tablename__ = 'absences'
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    reason_id = db.Column(db.Integer, db.ForeignKey('absence_reasons.id'), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('student_id', 'date', name='uq_absence_student_date'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "date": self.date.isoformat(),
            "reason_id": self.reason_id,
        }

    def __repr__(self):
        return f'<Absence student={self.student_id} on {self.date}>'
