class BookingError(Exception):
    """
    Base for errors a caller is expected to handle.
    Each one carries the HTTP status the API answers with.
    """
    status_code = 400
    message = "Booking request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidRange(BookingError):
    status_code = 400
    message = "start_time must be before end_time"


class NotFound(BookingError):
    status_code = 404
    message = "Booking not found"


class RoomNotFound(NotFound):
    message = "Room not found"


class Forbidden(BookingError):
    status_code = 403
    message = "You are not authorized to modify this booking"


class SlotUnavailable(BookingError):
    status_code = 409
    message = "This time slot is already booked"


class ConflictError(Exception):
    # Raised by the store when its own re-check (or the database) rejects an insert.
    # Never rendered to API callers; the reservation service turns it into SlotUnavailable.
    pass
