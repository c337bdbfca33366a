from models.db import db
from models.room import Room
from services.errors import RoomNotFound


class RoomDirectory:
    """Read-only room lookup used by the reservation service."""

    def __init__(self, session=None):
        self._session = session if session is not None else db.session

    def get_room(self, room_id) -> Room:
        room = self._session.get(Room, room_id) if room_id is not None else None
        if room is None:
            raise RoomNotFound()
        return room

    def list_rooms(self):
        return self._session.query(Room).order_by(Room.name.asc()).all()
