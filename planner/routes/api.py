# planner/routes/api.py

import logging
from datetime import date
from flask import Blueprint, jsonify, request

from planner.extensions import db
from planner.forms import (
    BatchLessonsForm, BulkCompleteForm, CompleteForm, DateForm, LessonForm, MakeupForm,
    RescheduleForm, request_formdata,
)
from planner.models.curriculum import Container
from planner.models.lesson import Lesson
from planner.models.setting import AppSetting
from planner.models.student import Student
from planner.scheduling.calendar import to_date
from planner.scheduling.cascade import bump_all_for_date, bump_single
from planner.scheduling.lessons import (
    bulk_complete_lessons, complete_lesson, create_lesson, reschedule_lesson,
    schedule_makeup_lesson, uncomplete_lesson, upcoming_planned_lessons,
)
from planner.scheduling.sequencer import batch_assign
from planner.scheduling.unit_of_work import transaction

# Create Blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api/v1")

logger = logging.getLogger(__name__)


# --- Helper Functions --- #
def validation_error(form):
    """Formats WTForms errors into a 400 JSON response."""
    return jsonify(error="Validation failed", fields=form.errors), 400


def lessons_payload(lessons):
    return {"lessons": [lesson.to_dict() for lesson in lessons], "count": len(lessons)}


def cascades_payload(cascades):
    return {
        "containers": {
            str(container_id): [lesson.to_dict() for lesson in lessons]
            for container_id, lessons in cascades.items()
        },
        "count": sum(len(lessons) for lessons in cascades.values()),
    }


# --- Container lessons --- #
@api_bp.route("/containers/<int:container_id>/lessons", methods=["GET"])
def list_lessons(container_id):
    db.get_or_404(Container, container_id)
    lessons = (Lesson.query.filter_by(container_id=container_id)
               .order_by(Lesson.lesson_number).all())
    return jsonify(lessons_payload(lessons))


@api_bp.route("/containers/<int:container_id>/lessons", methods=["POST"])
def add_lesson(container_id):
    db.get_or_404(Container, container_id)
    form = LessonForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        lesson = create_lesson(session, container_id, form.lesson_number.data,
                               title=form.title.data, scheduled_date=form.scheduled_date.data,
                               plan=form.plan.data)
    return jsonify(lesson.to_dict()), 201


@api_bp.route("/containers/<int:container_id>/lessons/batch", methods=["POST"])
def batch_create_lessons(container_id):
    db.get_or_404(Container, container_id)
    form = BatchLessonsForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)

    config = AppSetting.resolve_schedule_config(db.session)
    logger.info(f"Batch creating lessons {form.start_lesson.data}..{form.end_lesson.data} "
                f"for container {container_id}.")
    with transaction(db.session) as session:
        created = batch_assign(session, container_id, form.start_lesson.data, form.end_lesson.data,
                               form.start_date.data, config.school_days)
    return jsonify(lessons_payload(created)), 201


@api_bp.route("/containers/<int:container_id>/makeup", methods=["POST"])
def makeup_lesson(container_id):
    db.get_or_404(Container, container_id)
    form = MakeupForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        lesson = schedule_makeup_lesson(session, container_id, form.date.data,
                                        title=form.title.data, notes=form.notes.data)
    return jsonify(lesson.to_dict())


# --- Single lesson actions --- #
@api_bp.route("/lessons/<int:lesson_id>/bump", methods=["POST"])
def bump_lesson(lesson_id):
    logger.info(f"API request received to bump lesson {lesson_id}.")
    config = AppSetting.resolve_schedule_config(db.session)
    with transaction(db.session) as session:
        moved = bump_single(session, lesson_id, config)
    return jsonify(lessons_payload(moved))


@api_bp.route("/lessons/<int:lesson_id>/complete", methods=["POST"])
def complete(lesson_id):
    form = CompleteForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        lesson = complete_lesson(session, lesson_id, on=form.completion_date.data)
    return jsonify(lessons_payload([lesson] if lesson else []))


@api_bp.route("/lessons/<int:lesson_id>/uncomplete", methods=["POST"])
def uncomplete(lesson_id):
    with transaction(db.session) as session:
        lesson = uncomplete_lesson(session, lesson_id)
    return jsonify(lessons_payload([lesson] if lesson else []))


@api_bp.route("/lessons/<int:lesson_id>/reschedule", methods=["POST"])
def reschedule(lesson_id):
    form = RescheduleForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        lesson = reschedule_lesson(session, lesson_id, form.scheduled_date.data)
    return jsonify(lessons_payload([lesson] if lesson else []))


@api_bp.route("/lessons/complete", methods=["POST"])
def bulk_complete():
    form = BulkCompleteForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        lessons = bulk_complete_lessons(session, form.lesson_ids.data, on=form.completion_date.data)
    return jsonify(lessons_payload(lessons))


# --- Whole-day actions --- #
@api_bp.route("/schedule/sick-day", methods=["POST"])
def sick_day():
    form = DateForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    logger.info(f"API request received to bump every lesson on {form.date.data}.")
    config = AppSetting.resolve_schedule_config(db.session)
    with transaction(db.session) as session:
        cascades = bump_all_for_date(session, form.date.data, config)
    return jsonify(cascades_payload(cascades))


@api_bp.route("/students/<int:student_id>/upcoming", methods=["GET"])
def upcoming(student_id):
    db.get_or_404(Student, student_id)
    after = to_date(request.args.get("after") or date.today())
    limit = request.args.get("limit", 30, type=int)
    lessons = upcoming_planned_lessons(db.session, student_id, after, limit=limit)
    return jsonify(lessons_payload(lessons))
