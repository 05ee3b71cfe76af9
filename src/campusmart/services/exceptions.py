"""Domain errors raised by the logistics services.

The API layer maps each family to an HTTP status in ``campusmart.main``.
"""


class LogisticsError(Exception):
    """Base class for all logistics domain errors."""

    code = "LOGISTICS_ERROR"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class AuthorizationError(LogisticsError):
    """Caller is not allowed to perform this operation."""

    code = "FORBIDDEN"


class ValidationError(LogisticsError):
    """Input is malformed or out of range."""

    code = "VALIDATION_ERROR"


class InvalidTransitionError(ValidationError):
    """Status is not part of the booking's status vocabulary."""

    code = "INVALID_STATUS"


class NotFoundError(LogisticsError):
    """Requested entity does not exist."""

    code = "NOT_FOUND"


class ScheduleNotFoundError(NotFoundError):
    """Schedule not found."""

    code = "SCHEDULE_NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    code = "ORDER_NOT_FOUND"


class BookingNotFoundError(NotFoundError):
    """Booking not found."""

    code = "BOOKING_NOT_FOUND"


class UserNotFoundError(NotFoundError):
    """User not found."""

    code = "USER_NOT_FOUND"


class ScheduleInactiveError(LogisticsError):
    """Schedule has been deactivated."""

    code = "SCHEDULE_INACTIVE"


class IneligibleScheduleError(LogisticsError):
    """Order is not eligible for this schedule."""

    code = "SCHEDULE_NOT_ELIGIBLE"


class ConflictError(LogisticsError):
    """Request conflicts with current state."""

    code = "CONFLICT"


class CapacityExceededError(ConflictError):
    """Slot no longer available."""

    code = "CAPACITY_EXCEEDED"


class DuplicateBookingError(ConflictError):
    """Order already has a booking of this kind."""

    code = "DUPLICATE_BOOKING"


class ScheduleConflictError(ConflictError):
    """Admin already has an overlapping schedule."""

    code = "SCHEDULE_OVERLAP"


class SlotBusyError(ConflictError):
    """Schedule is busy with another booking, try again."""

    code = "SLOT_BUSY"


class InternalError(LogisticsError):
    """Storage failure."""

    code = "INTERNAL_ERROR"
