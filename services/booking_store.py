import threading
from contextlib import contextmanager
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models.db import db
from models.booking import Booking, CONFIRMED, CANCELLED
from models.room import Room
from services.errors import ConflictError, Forbidden, NotFound, RoomNotFound

# Name of the PostgreSQL exclusion constraint added by the overlap migration.
OVERLAP_CONSTRAINT = "no_overlapping_bookings"


def _is_overlap_violation(exc: IntegrityError) -> bool:
    # 23P01 = exclusion_violation
    if getattr(exc.orig, "pgcode", None) == "23P01":
        return True
    return OVERLAP_CONSTRAINT in str(exc.orig)


class RoomLocks:
    """
    One lock per room id, created on first use.
    Holding a room's lock makes "check availability, then insert" a single
    step for every request served by this process.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks = {}
        self._guard = threading.Lock()

    def _lock_for(self, room_id) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, room_id, timeout: float = None):
        lock = self._lock_for(room_id)
        wait = self.timeout if timeout is None else timeout
        if not lock.acquire(timeout=wait):
            current_app.logger.warning("Timed out after %ss waiting for room %s", wait, room_id)
            raise ConflictError(f"Room {room_id} is busy")
        try:
            yield
        finally:
            lock.release()


class BookingStore:
    """
    Owns the reservation set. Every query goes to the database; nothing is
    cached between calls.

    Cancelled bookings stay in the table with status CANCELLED so that
    ownership can still be checked after cancellation, but they are invisible
    to listings, lookups and conflict checks.
    """

    def __init__(self, session=None, locks: RoomLocks = None):
        self._session = session if session is not None else db.session
        self.locks = locks or RoomLocks()

    def room_lock(self, room_id):
        return self.locks.hold(room_id)

    # ---------- queries ----------
    def _active(self):
        return self._session.query(Booking).filter(Booking.status == CONFIRMED)

    def list_by_room(self, room_id):
        return (
            self._active()
            .filter(Booking.room_id == room_id)
            .order_by(Booking.start_time.asc(), Booking.id.asc())
            .all()
        )

    def list(self, room_id=None, user_id=None):
        q = self._active()
        if room_id is not None:
            q = q.filter(Booking.room_id == room_id)
        if user_id is not None:
            q = q.filter(Booking.user_id == user_id)
        return q.order_by(Booking.start_time.asc(), Booking.id.asc()).all()

    def get(self, booking_id) -> Booking:
        booking = self._session.get(Booking, booking_id)
        if booking is None or not booking.is_active:
            raise NotFound()
        return booking

    def _overlapping(self, booking: Booking, exclude_booking_id=None):
        q = self._active().filter(
            Booking.room_id == booking.room_id,
            Booking.start_time < booking.end_time,
            Booking.end_time > booking.start_time,
        )
        if exclude_booking_id is not None:
            q = q.filter(Booking.id != exclude_booking_id)
        return q.first()

    # ---------- mutations ----------
    @contextmanager
    def _atomic(self):
        try:
            yield
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            if _is_overlap_violation(exc):
                current_app.logger.warning("Database rejected overlapping booking: %s", exc.orig)
                raise ConflictError("Booking overlaps an existing booking") from exc
            raise
        except Exception:
            self._session.rollback()
            raise

    def _touch_room(self, room_id, now: datetime):
        # Taking the room row's write lock first serializes writers for that room
        # across processes (row lock on PostgreSQL, database write lock on SQLite).
        touched = (
            self._session.query(Room)
            .filter(Room.id == room_id)
            .update({Room.updated_at: now}, synchronize_session=False)
        )
        if not touched:
            raise RoomNotFound()

    def _mark_cancelled(self, booking: Booking, now: datetime, reason=None):
        updated = (
            self._session.query(Booking)
            .filter(Booking.id == booking.id, Booking.status == CONFIRMED)
            .update(
                {
                    Booking.status: CANCELLED,
                    Booking.cancelled_at: now,
                    Booking.cancel_reason: reason,
                    Booking.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        # someone else cancelled it first
        if not updated:
            raise NotFound()

    def _add_checked(self, booking: Booking, now: datetime, exclude_booking_id=None):
        clash = self._overlapping(booking, exclude_booking_id)
        if clash is not None:
            current_app.logger.warning(
                "Re-check caught overlap in room %s: %s vs booking %s",
                booking.room_id, booking.interval, clash.id,
            )
            raise ConflictError(f"Booking overlaps booking {clash.id}")

        booking.status = CONFIRMED
        booking.created_at = now
        booking.updated_at = now
        self._session.add(booking)

    def insert(self, booking: Booking, exclude_booking_id=None) -> Booking:
        """
        Persist a booking that already passed the availability check.
        The overlap check is repeated inside the write transaction; if it
        fails (or the database's exclusion constraint fires) ConflictError
        is raised and nothing is written.
        """
        now = datetime.utcnow()
        with self._atomic():
            self._touch_room(booking.room_id, now)
            self._add_checked(booking, now, exclude_booking_id)
        return booking

    def get_owned(self, booking_id, requester_id) -> Booking:
        """Active booking owned by requester_id; Forbidden wins over NotFound for other users."""
        booking = self._session.get(Booking, booking_id)
        if booking is None:
            raise NotFound()
        if booking.user_id != requester_id:
            raise Forbidden()
        if not booking.is_active:
            raise NotFound()
        return booking

    def remove(self, booking_id, requester_id) -> None:
        booking = self.get_owned(booking_id, requester_id)
        now = datetime.utcnow()
        with self._atomic():
            self._touch_room(booking.room_id, now)
            self._mark_cancelled(booking, now)

    def admin_remove(self, booking_id, reason: str = None) -> Booking:
        booking = self.get(booking_id)
        now = datetime.utcnow()
        with self._atomic():
            self._touch_room(booking.room_id, now)
            self._mark_cancelled(booking, now, reason or "Admin cancellation")
        return booking

    def replace(self, booking_id, requester_id, new_booking: Booking) -> Booking:
        """Cancel an owned booking and insert its replacement in one transaction."""
        old = self.get_owned(booking_id, requester_id)
        new_booking.room_id = old.room_id
        new_booking.user_id = old.user_id
        now = datetime.utcnow()
        with self._atomic():
            self._touch_room(old.room_id, now)
            self._mark_cancelled(old, now, "Rescheduled")
            self._add_checked(new_booking, now, exclude_booking_id=old.id)
        return new_booking
