# planner/routes/curriculum.py

import logging
from flask import Blueprint, jsonify

from planner.extensions import db
from planner.forms import NamedForm, StudentForm, request_formdata
from planner.models.curriculum import Container, Resource, SharedCurriculum
from planner.models.student import Student, Subject
from planner.routes.api import validation_error
from planner.scheduling.unit_of_work import transaction

curriculum_bp = Blueprint("curriculum", __name__, url_prefix="/api/v1")

logger = logging.getLogger(__name__)


def student_dict(student):
    return {
        "id": student.id,
        "name": student.name,
        "color": student.color,
        "grade_level": student.grade_level,
        "subjects": [{"id": subject.id, "name": subject.name} for subject in student.subjects],
    }


def container_dict(container):
    data = {"id": container.id, "name": container.name, "kind": container.kind,
            "student_ids": container.student_ids}
    if isinstance(container, Resource):
        data["subject_id"] = container.subject_id
    else:
        data["description"] = container.description
    return data


# --- Students and subjects --- #

@curriculum_bp.route("/students", methods=["GET"])
def list_students():
    students = Student.query.order_by(Student.name).all()
    return jsonify({"students": [student_dict(student) for student in students]})


@curriculum_bp.route("/students", methods=["POST"])
def add_student():
    form = StudentForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    student = Student(name=form.name.data.strip(), color=form.color.data or 'rose',
                      grade_level=form.grade_level.data or None)
    with transaction(db.session) as session:
        session.add(student)
    logger.info(f"Added student {student.id}.")
    return jsonify(student_dict(student)), 201


@curriculum_bp.route("/students/<int:student_id>/subjects", methods=["POST"])
def add_subject(student_id):
    db.get_or_404(Student, student_id)
    form = NamedForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    subject = Subject(name=form.name.data.strip(), student_id=student_id)
    with transaction(db.session) as session:
        session.add(subject)
    return jsonify({"id": subject.id, "name": subject.name, "student_id": student_id}), 201


# --- Containers --- #

@curriculum_bp.route("/subjects/<int:subject_id>/resources", methods=["POST"])
def add_resource(subject_id):
    db.get_or_404(Subject, subject_id)
    form = NamedForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    resource = Resource(name=form.name.data.strip(), subject_id=subject_id)
    with transaction(db.session) as session:
        session.add(resource)
    return jsonify(container_dict(resource)), 201


@curriculum_bp.route("/shared-curricula", methods=["POST"])
def add_shared_curriculum():
    form = NamedForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    curriculum = SharedCurriculum(name=form.name.data.strip(), description=form.description.data or None)
    with transaction(db.session) as session:
        session.add(curriculum)
    return jsonify(container_dict(curriculum)), 201


@curriculum_bp.route("/shared-curricula/<int:curriculum_id>/students/<int:student_id>", methods=["POST"])
def add_shared_member(curriculum_id, student_id):
    curriculum = db.get_or_404(SharedCurriculum, curriculum_id)
    student = db.get_or_404(Student, student_id)
    with transaction(db.session):
        if student not in curriculum.students:
            curriculum.students.append(student)
    return jsonify(container_dict(curriculum))


@curriculum_bp.route("/shared-curricula/<int:curriculum_id>/students/<int:student_id>", methods=["DELETE"])
def remove_shared_member(curriculum_id, student_id):
    curriculum = db.get_or_404(SharedCurriculum, curriculum_id)
    with transaction(db.session):
        curriculum.students = [s for s in curriculum.students if s.id != student_id]
    return jsonify(container_dict(curriculum))


@curriculum_bp.route("/containers/<int:container_id>", methods=["GET"])
def get_container(container_id):
    container = db.get_or_404(Container, container_id)
    return jsonify(container_dict(container))


@curriculum_bp.route("/containers/<int:container_id>", methods=["DELETE"])
def delete_container(container_id):
    container = db.get_or_404(Container, container_id)
    with transaction(db.session) as session:
        # Cascade delete removes the container's lessons
        session.delete(container)
    return jsonify({"removed": True})
