from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DateField, Field, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, ValidationError

from planner.scheduling.config import BumpBehavior


def _form_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def request_formdata():
    """Form data for the current request, accepting JSON bodies as well as form posts.

    JSON nulls are dropped so that they read as missing fields, and JSON
    booleans become the strings BooleanField understands.
    """
    if request.is_json:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return MultiDict()
        return MultiDict({key: _form_value(value) for key, value in payload.items() if value is not None})
    return request.form


class IntegerListField(Field):
    """A list of integers, sent as a JSON array or as a repeated form key."""

    def _value(self):
        return ",".join(str(value) for value in self.data or [])

    def process_formdata(self, valuelist):
        self.data = []
        for value in valuelist:
            try:
                self.data.append(int(value))
            except (TypeError, ValueError):
                self.data = []
                raise ValueError(self.gettext("Not a valid integer value."))

    def process_data(self, value):
        self.data = list(value) if value else []


def weekday_range(form, field):
    for value in field.data or []:
        if not 0 <= value <= 6:
            raise ValidationError(f"Invalid weekday number: {value}")


class ApiForm(FlaskForm):
    """Base form for API payloads (CSRF handled by the blueprint)."""

    class Meta:
        csrf = False


class BatchLessonsForm(ApiForm):
    start_lesson = IntegerField('First lesson', validators=[InputRequired(), NumberRange(min=1)])
    end_lesson = IntegerField('Last lesson', validators=[InputRequired(), NumberRange(min=1)])
    start_date = DateField('Start date', validators=[DataRequired()])


class LessonForm(ApiForm):
    lesson_number = IntegerField('Lesson number', validators=[InputRequired(), NumberRange(min=1)])
    title = StringField('Title', validators=[Optional(), Length(max=255)])
    scheduled_date = DateField('Scheduled date', validators=[Optional()])
    plan = TextAreaField('Plan', validators=[Optional()])


class RescheduleForm(ApiForm):
    # Empty date unschedules the lesson
    scheduled_date = DateField('Scheduled date', validators=[Optional()])


class CompleteForm(ApiForm):
    completion_date = DateField('Completion date', validators=[Optional()])


class BulkCompleteForm(ApiForm):
    lesson_ids = IntegerListField('Lessons')
    completion_date = DateField('Completion date', validators=[Optional()])


class MakeupForm(ApiForm):
    date = DateField('Date', validators=[DataRequired()])
    title = StringField('Title', validators=[Optional(), Length(max=255)])
    notes = TextAreaField('Notes', validators=[Optional()])


class DateForm(ApiForm):
    date = DateField('Date', validators=[DataRequired()])


class AbsenceForm(ApiForm):
    student_id = IntegerField('Student', validators=[InputRequired()])
    date = DateField('Date', validators=[DataRequired()])
    reason_id = IntegerField('Reason', validators=[InputRequired()])


class AbsenceForAllForm(ApiForm):
    date = DateField('Date', validators=[DataRequired()])
    reason_id = IntegerField('Reason', validators=[InputRequired()])


class AbsenceReasonForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    color = StringField('Color', validators=[DataRequired(), Length(max=20)])
    counts_as_present = BooleanField('Counts as present')


class ReorderForm(ApiForm):
    ordered_ids = IntegerListField('Reasons')


class ScheduleSettingsForm(ApiForm):
    school_days = IntegerListField('School days', validators=[weekday_range])
    bump_behavior = SelectField('Bump behavior',
                                choices=[(b.value, b.value) for b in BumpBehavior],
                                default=BumpBehavior.NEXT_SCHOOL_DAY.value)
    absence_auto_bump = BooleanField('Bump lessons on absence', default=True)
    default_lesson_count = IntegerField('Default lesson count', validators=[Optional(), NumberRange(min=1)])


class StudentForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    color = StringField('Color', validators=[Optional(), Length(max=20)])
    grade_level = StringField('Grade level', validators=[Optional(), Length(max=20)])


class NamedForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
