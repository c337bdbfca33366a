from flask import current_app
from models import db
from models.room import Room

def seed_rooms(rooms=None) -> int:
    """Create the configured rooms that don't exist yet (safe & idempotent)."""
    if rooms is None:
        rooms = current_app.config.get("DEFAULT_ROOMS", [])
    existing = {r.name for r in Room.query.all()}
    created = 0
    for data in rooms:
        if data["name"] not in existing:
            db.session.add(Room(**data))
            created += 1
    db.session.commit()
    return created
