"""Errors raised by the lesson scheduling engine."""


class SchedulingError(Exception):
    """Base class for scheduling errors reported back to the caller."""


class LessonRangeError(SchedulingError, ValueError):
    """The requested lesson-number range is empty or reversed."""

    def __init__(self, start_number, end_number):
        self.start_number = start_number
        self.end_number = end_number
        super().__init__(f"Invalid lesson range: {start_number}..{end_number}")


class InvalidDateError(SchedulingError, ValueError):
    """A date argument is missing, malformed or not a calendar date."""


class InvalidScheduleConfigError(SchedulingError, ValueError):
    """School days or bump behavior hold values outside their domain."""


class DuplicateLessonError(SchedulingError):
    """A lesson with this number already exists in the container."""

    def __init__(self, container_id, lesson_number):
        self.container_id = container_id
        self.lesson_number = lesson_number
        super().__init__(f"Lesson {lesson_number} already exists in container {container_id}")
