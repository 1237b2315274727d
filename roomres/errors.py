class ReservationError(Exception):
    """Base class for every error the reservation engine raises."""

    default_message = "Reservation request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReservationError):
    """Malformed input. The caller corrects it and retries."""

    default_message = "Invalid input"


class InvalidIntervalError(ValidationError):
    default_message = "Reservation end time must be after the start time."


class UnauthenticatedError(ValidationError):
    default_message = "You must be signed in to reserve a room."


class BookingConflictError(ReservationError):
    """Admission rejected because the interval overlaps a confirmed reservation."""

    default_message = "That time overlaps an existing reservation."


class NotFoundError(ReservationError):
    default_message = "Not found"


class AlreadyCancelledError(ReservationError):
    default_message = "Reservation is already cancelled."


class TransportError(ReservationError):
    """The underlying store could not be reached or failed mid-operation."""

    default_message = "Reservations are temporarily unavailable. Please try again."
