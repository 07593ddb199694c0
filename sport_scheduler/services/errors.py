"""
Typed outcomes for business-rule failures.

Every error is a ValueError so callers that only care about "the request was
rejected" can keep catching ValueError. Routes map ``status_code`` onto the
HTTP response.
"""

from typing import Dict, Optional


class SchedulerError(ValueError):
    """Base class for rejected requests."""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class InvalidInput(SchedulerError):
    status_code = 400
    default_message = "Invalid data"


class NotFound(SchedulerError):
    status_code = 404
    default_message = "Not found"


class NotJoinable(SchedulerError):
    # Missing, cancelled and past sessions share one message
    status_code = 404
    default_message = "Session not found or not joinable"


class SessionFull(SchedulerError):
    status_code = 400
    default_message = "Session is full"


class AlreadyJoined(SchedulerError):
    status_code = 400
    default_message = "Already joined"


class TimeConflict(SchedulerError):
    """The player already holds a session within an hour on the same date."""

    status_code = 400
    default_message = "You are already joined to another session at this time"

    def __init__(self, message: Optional[str] = None, conflict: Optional[Dict] = None):
        super().__init__(message)
        self.conflict = conflict or {}


class Forbidden(SchedulerError):
    status_code = 403
    default_message = "Forbidden"


class Unavailable(SchedulerError):
    status_code = 503
    default_message = "Database unavailable. Please try again later."
