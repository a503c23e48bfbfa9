# planner/routes/export.py

import io
import logging
from datetime import date
import pandas as pd
from flask import Blueprint, request, send_file

from planner.extensions import db
from planner.models.curriculum import Resource
from planner.models.lesson import Lesson, LessonStatus
from planner.models.student import Student, Subject
from planner.scheduling.calendar import to_date

export_bp = Blueprint("export", __name__, url_prefix="/api/v1/export")

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Student", "Subject", "Resource", "Lesson Number", "Lesson Title", "Completion Date",
]


def completed_lessons_frame(session, start, end, student_ids=None):
    """Completed lessons with completion date in ``start..end`` as a DataFrame."""
    query = (session.query(Student.name, Subject.name, Resource.name, Lesson.lesson_number,
                           Lesson.title, Lesson.completion_date)
             .select_from(Lesson)
             .join(Resource, Lesson.container_id == Resource.id)
             .join(Subject, Resource.subject_id == Subject.id)
             .join(Student, Subject.student_id == Student.id)
             .filter(Lesson.status == LessonStatus.COMPLETED,
                     Lesson.completion_date >= start,
                     Lesson.completion_date <= end))
    if student_ids:
        query = query.filter(Student.id.in_(student_ids))
    rows = query.order_by(Student.name, Lesson.completion_date, Subject.name).all()
    df = pd.DataFrame([tuple(row) for row in rows], columns=EXPORT_COLUMNS)
    df["Completion Date"] = df["Completion Date"].map(lambda d: d.isoformat())
    return df


@export_bp.route("/lessons.csv", methods=["GET"])
def export_lessons():
    today = date.today()
    start = to_date(request.args.get("start") or today.replace(day=1))
    end = to_date(request.args.get("end") or today)
    student_ids = request.args.getlist("student_id", type=int)

    df = completed_lessons_frame(db.session, start, end, student_ids)
    logger.info(f"Exporting {len(df)} completed lessons between {start} and {end}.")

    output = io.BytesIO()
    df.to_csv(output, index=False, encoding="utf-8")
    output.seek(0)
    return send_file(
        output,
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"completed_lessons_{start.isoformat()}_{end.isoformat()}.csv",
    )
