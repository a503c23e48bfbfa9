# planner/models/setting.py

import json
import logging

from planner.extensions import db
from planner.scheduling.config import DEFAULT_SCHOOL_DAYS, BumpBehavior, ScheduleConfig, normalize_school_days
from planner.scheduling.errors import InvalidScheduleConfigError

logger = logging.getLogger(__name__)

SCHOOL_DAYS_KEY = 'schoolDays'
BUMP_BEHAVIOR_KEY = 'bumpBehavior'
ABSENCE_AUTO_BUMP_KEY = 'absenceAutoBump'
DEFAULT_LESSON_COUNT_KEY = 'defaultLessonCount'


class AppSetting(db.Model):
    """
    Key/value application settings.

    Scheduling settings are read here and turned into a ScheduleConfig
    before any engine call.
    """
    __tablename__ = 'app_settings'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), nullable=False, unique=True)
    value = db.Column(db.Text, nullable=False)

    def __repr__(self):
        return f"<AppSetting {self.key}={self.value}>"

    @staticmethod
    def get(session, key, default=None):
        setting = session.query(AppSetting).filter_by(key=key).first()
        return setting.value if setting else default

    @staticmethod
    def set(session, key, value):
        setting = session.query(AppSetting).filter_by(key=key).first()
        if setting is None:
            setting = AppSetting(key=key, value=value)
            session.add(setting)
        else:
            setting.value = value
        session.flush()
        return setting

    @staticmethod
    def resolve_schedule_config(session):
        """
        Build the ScheduleConfig from stored settings.

        Missing, unparseable or empty school days fall back to Monday-Friday;
        an unknown bump behavior falls back to next school day.
        """
        school_days = DEFAULT_SCHOOL_DAYS
        raw_days = AppSetting.get(session, SCHOOL_DAYS_KEY)
        if raw_days:
            try:
                school_days = normalize_school_days(json.loads(raw_days)) or DEFAULT_SCHOOL_DAYS
            except (ValueError, InvalidScheduleConfigError) as e:
                logger.warning(f"Ignoring stored school days {raw_days!r}: {e}")

        raw_behavior = AppSetting.get(session, BUMP_BEHAVIOR_KEY)
        if raw_behavior == BumpBehavior.SAME_DAY_NEXT_WEEK.value:
            behavior = BumpBehavior.SAME_DAY_NEXT_WEEK
        else:
            behavior = BumpBehavior.NEXT_SCHOOL_DAY

        auto_bump = AppSetting.get(session, ABSENCE_AUTO_BUMP_KEY) != 'false'

        raw_count = AppSetting.get(session, DEFAULT_LESSON_COUNT_KEY)
        try:
            lesson_count = int(raw_count) if raw_count else 20
        except ValueError:
            lesson_count = 20
        if lesson_count < 1:
            lesson_count = 20

        return ScheduleConfig(
            school_days=school_days,
            bump_behavior=behavior,
            absence_auto_bump=auto_bump,
            default_lesson_count=lesson_count,
        )

    @staticmethod
    def store_schedule_config(session, config):
        AppSetting.set(session, SCHOOL_DAYS_KEY, json.dumps(sorted(config.school_days)))
        AppSetting.set(session, BUMP_BEHAVIOR_KEY, config.bump_behavior.value)
        AppSetting.set(session, ABSENCE_AUTO_BUMP_KEY, 'true' if config.absence_auto_bump else 'false')
        AppSetting.set(session, DEFAULT_LESSON_COUNT_KEY, str(config.default_lesson_count))
        return config
