# planner/routes/settings.py

import logging
from dataclasses import replace
from flask import Blueprint, jsonify

from planner.extensions import db
from planner.forms import ScheduleSettingsForm, request_formdata
from planner.models.setting import AppSetting
from planner.routes.api import validation_error
from planner.scheduling.config import BumpBehavior
from planner.scheduling.unit_of_work import transaction

settings_bp = Blueprint("settings", __name__, url_prefix="/api/v1/settings")

logger = logging.getLogger(__name__)


@settings_bp.route("/schedule", methods=["GET"])
def get_schedule():
    config = AppSetting.resolve_schedule_config(db.session)
    return jsonify(config.to_dict())


@settings_bp.route("/schedule", methods=["PUT", "POST"])
def update_schedule():
    formdata = request_formdata()
    form = ScheduleSettingsForm(formdata=formdata)
    if not form.validate():
        return validation_error(form)

    # Only the submitted settings change
    config = AppSetting.resolve_schedule_config(db.session)
    changes = {}
    if "school_days" in formdata:
        changes["school_days"] = form.school_days.data
    if "bump_behavior" in formdata:
        changes["bump_behavior"] = BumpBehavior(form.bump_behavior.data)
    if "absence_auto_bump" in formdata:
        changes["absence_auto_bump"] = form.absence_auto_bump.data
    if form.default_lesson_count.data:
        changes["default_lesson_count"] = form.default_lesson_count.data
    config = replace(config, **changes)

    with transaction(db.session) as session:
        AppSetting.store_schedule_config(session, config)
    logger.info(f"Schedule settings updated: {config.to_dict()}")
    return jsonify(config.to_dict())
