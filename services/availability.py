from services.interval import TimeInterval


class AvailabilityChecker:
    """
    Decides whether a candidate interval is free in a room.

    The default lookup is a linear scan over the room's active bookings,
    which is plenty for one room's worth of reservations. An indexed lookup
    (interval tree, range query) can replace it by overriding ``conflicts``.
    """

    def __init__(self, store):
        self.store = store

    def conflicts(self, room_id, candidate: TimeInterval, exclude_booking_id=None):
        return [
            b for b in self.store.list_by_room(room_id)
            if b.id != exclude_booking_id and b.interval.overlaps(candidate)
        ]

    def is_available(self, room_id, candidate: TimeInterval, exclude_booking_id=None) -> bool:
        return not self.conflicts(room_id, candidate, exclude_booking_id)
