from flask import current_app

from models.booking import Booking
from services.availability import AvailabilityChecker
from services.errors import BookingError, ConflictError, SlotUnavailable
from services.interval import TimeInterval

# Request states:
#   RECEIVED -> VALIDATED -> ADMISSIBILITY_CHECKED -> COMMITTED
#   RECEIVED -> ... -> REJECTED
RECEIVED = "RECEIVED"
VALIDATED = "VALIDATED"
ADMISSIBILITY_CHECKED = "ADMISSIBILITY_CHECKED"
COMMITTED = "COMMITTED"
REJECTED = "REJECTED"


def _trace(state: str, **ctx):
    current_app.logger.debug("booking request %s %s", state, ctx)


class ReservationService:
    """
    Entry point for creating and cancelling bookings.

    Dependencies are passed in explicitly: a BookingStore, a room lookup
    (anything with ``get_room(room_id)`` raising RoomNotFound) and optionally
    an AvailabilityChecker built on the same store.
    """

    def __init__(self, store, rooms, checker: AvailabilityChecker = None):
        self.store = store
        self.rooms = rooms
        self.checker = checker or AvailabilityChecker(store)

    def create_booking(self, user_id, room_id, start, end, note=None) -> Booking:
        _trace(RECEIVED, user_id=user_id, room_id=room_id)
        try:
            interval = TimeInterval(start, end)
            room = self.rooms.get_room(room_id)
            _trace(VALIDATED, room_id=room.id, interval=str(interval))

            with self.store.room_lock(room.id):
                if not self.checker.is_available(room.id, interval):
                    raise SlotUnavailable()
                _trace(ADMISSIBILITY_CHECKED, room_id=room.id, interval=str(interval))

                booking = Booking(
                    user_id=user_id,
                    room_id=room.id,
                    start_time=interval.start,
                    end_time=interval.end,
                    note=note or None,
                )
                booking = self.store.insert(booking)
        except ConflictError:
            _trace(REJECTED, reason="conflict on insert")
            raise SlotUnavailable()
        except BookingError as exc:
            _trace(REJECTED, reason=exc.message)
            raise

        _trace(COMMITTED, booking_id=booking.id)
        return booking

    def cancel_booking(self, requester_id, booking_id) -> None:
        self.store.remove(booking_id, requester_id)

    def admin_cancel_booking(self, booking_id, reason=None) -> Booking:
        return self.store.admin_remove(booking_id, reason)

    def reschedule_booking(self, requester_id, booking_id, start, end, note=None) -> Booking:
        """
        Move a booking to a new interval: the old booking is cancelled and a
        new one created, atomically. The old booking's own slot does not
        count as a conflict.
        """
        interval = TimeInterval(start, end)
        current = self.store.get_owned(booking_id, requester_id)
        replacement = Booking(
            start_time=interval.start,
            end_time=interval.end,
            # None keeps the current note, "" clears it
            note=current.note if note is None else (note or None),
        )
        try:
            with self.store.room_lock(current.room_id):
                if not self.checker.is_available(current.room_id, interval, exclude_booking_id=current.id):
                    raise SlotUnavailable()
                return self.store.replace(booking_id, requester_id, replacement)
        except ConflictError:
            raise SlotUnavailable()

    def list_bookings(self, room_id=None, user_id=None):
        return self.store.list(room_id=room_id, user_id=user_id)

    def get_booking(self, booking_id) -> Booking:
        return self.store.get(booking_id)

    def check_availability(self, room_id, start, end) -> bool:
        interval = TimeInterval(start, end)
        room = self.rooms.get_room(room_id)
        return self.checker.is_available(room.id, interval)

    def list_rooms(self):
        return self.rooms.list_rooms()
