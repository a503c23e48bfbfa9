# planner/models/curriculum.py

from planner.extensions import db

# Students following a shared curriculum together
shared_curriculum_students = db.Table(
    'shared_curriculum_students',
    db.Column('shared_curriculum_id', db.Integer, db.ForeignKey('containers.id'), primary_key=True),
    db.Column('student_id', db.Integer, db.ForeignKey('students.id'), primary_key=True),
)


class Container(db.Model):
    """An ordered holder of lessons sharing one date-cascade scope.

    Resources belong to a single student through their subject, shared
    curricula to any number of students. Both live in one table.
    """
    __tablename__ = 'containers'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    kind = db.Column(db.String(30), nullable=False)
    lessons = db.relationship('Lesson', backref='container', lazy=True, cascade="all, delete-orphan",
                              order_by='Lesson.lesson_number')

    __mapper_args__ = {'polymorphic_on': kind, 'polymorphic_identity': 'container'}

    def __repr__(self):
        return f'<{type(self).__name__} {self.name}>'


class Resource(Container):
    """A textbook or course followed by one student."""
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id'), nullable=True, index=True)

    __mapper_args__ = {'polymorphic_identity': 'resource'}

    @property
    def student_ids(self):
        return [self.subject.student_id] if self.subject else []


class SharedCurriculum(Container):
    """A curriculum taught to several students at once."""
    description = db.Column(db.Text, nullable=True)
    students = db.relationship('Student', secondary=shared_curriculum_students, lazy=True,
                               backref=db.backref('shared_curricula', lazy=True))

    __mapper_args__ = {'polymorphic_identity': 'shared_curriculum'}

    @property
    def student_ids(self):
        return sorted(student.id for student in self.students)
