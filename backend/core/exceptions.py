"""
Scheduling errors.

Every rejection the engine can produce is one of these classes, so the
route layer only has to call ``to_http_exception()`` to render it.
"""

from fastapi import HTTPException, status


class SchedulingError(Exception):
    """Base class for all errors raised by the scheduling core."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class MissingParameterError(SchedulingError):
    default_message = 'Missing required parameters.'


class FormatError(SchedulingError):
    default_message = 'Invalid date format for starts_at or ends_at'


class OutsideBusinessHoursError(SchedulingError):
    default_message = 'Appointments must be during business hours (M-F 8am-5pm PT)'


class AlignmentError(SchedulingError):
    default_message = 'Appointments must start at :00 or :30 minutes'


class DurationError(SchedulingError):
    default_message = 'Appointments must be exactly 30 minutes long'


class ConflictError(SchedulingError):
    """The trainer already has an appointment at the requested start."""

    status_code = status.HTTP_409_CONFLICT
    default_message = 'Appointment slot is already booked'


class RepositoryError(SchedulingError):
    """Any persistence failure other than a uniqueness violation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class UniqueConstraintViolation(Exception):
    """Raised by the repository when (trainer_id, starts_at) is already taken.

    Not user-facing: the engine translates it into ``ConflictError``.
    """
