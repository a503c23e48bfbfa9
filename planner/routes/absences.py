# planner/routes/absences.py

import logging
from flask import Blueprint, jsonify

from planner.extensions import db
from planner.forms import AbsenceForAllForm, AbsenceForm, AbsenceReasonForm, ReorderForm, request_formdata
from planner.models.absence import AbsenceReason
from planner.models.setting import AppSetting
from planner.models.student import Student
from planner.routes.api import validation_error
from planner.scheduling.absences import (
    create_absence_reason, delete_absence_reason, log_absence, log_absence_for_all,
    remove_absence, reorder_absence_reasons,
)
from planner.scheduling.unit_of_work import transaction

absences_bp = Blueprint("absences", __name__, url_prefix="/api/v1")

logger = logging.getLogger(__name__)


def outcome_payload(outcome):
    return {
        "absence": outcome.absence.to_dict(),
        "created": outcome.created,
        "moved_lessons": [lesson.to_dict() for lesson in outcome.moved_lessons],
    }


@absences_bp.route("/absences", methods=["POST"])
def add_absence():
    form = AbsenceForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    db.get_or_404(Student, form.student_id.data)
    db.get_or_404(AbsenceReason, form.reason_id.data)

    logger.info(f"Logging absence for student {form.student_id.data} on {form.date.data}.")
    config = AppSetting.resolve_schedule_config(db.session)
    with transaction(db.session) as session:
        outcome = log_absence(session, form.student_id.data, form.date.data, form.reason_id.data, config)
    return jsonify(outcome_payload(outcome))


@absences_bp.route("/absences/all", methods=["POST"])
def add_absence_for_all():
    form = AbsenceForAllForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    db.get_or_404(AbsenceReason, form.reason_id.data)

    logger.info(f"Logging absence for every scheduled student on {form.date.data}.")
    config = AppSetting.resolve_schedule_config(db.session)
    with transaction(db.session) as session:
        outcomes = log_absence_for_all(session, form.date.data, form.reason_id.data, config)
    return jsonify({"absences": [outcome_payload(outcome) for outcome in outcomes]})


@absences_bp.route("/absences/<int:absence_id>", methods=["DELETE"])
def delete_absence(absence_id):
    with transaction(db.session) as session:
        removed = remove_absence(session, absence_id)
    return jsonify({"removed": removed})


# --- Absence reasons --- #
@absences_bp.route("/absence-reasons", methods=["GET"])
def list_reasons():
    with transaction(db.session) as session:
        reasons = AbsenceReason.ensure_defaults(session)
    return jsonify({"reasons": [reason.to_dict() for reason in reasons]})


@absences_bp.route("/absence-reasons", methods=["POST"])
def add_reason():
    form = AbsenceReasonForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        reason = create_absence_reason(session, form.name.data, form.color.data,
                                       counts_as_present=form.counts_as_present.data)
    return jsonify(reason.to_dict()), 201


@absences_bp.route("/absence-reasons/reorder", methods=["POST"])
def reorder_reasons():
    form = ReorderForm(formdata=request_formdata())
    if not form.validate():
        return validation_error(form)
    with transaction(db.session) as session:
        reasons = reorder_absence_reasons(session, form.ordered_ids.data)
    return jsonify({"reasons": [reason.to_dict() for reason in reasons]})


@absences_bp.route("/absence-reasons/<int:reason_id>", methods=["DELETE"])
def delete_reason(reason_id):
    with transaction(db.session) as session:
        removed = delete_absence_reason(session, reason_id)
    return jsonify({"removed": removed})
