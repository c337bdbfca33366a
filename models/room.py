from datetime import datetime
from models.db import db

class Room(db.Model):
    __tablename__ = "rooms"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)

    # informational only, a room holds one booking at a time
    capacity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    # touched by every booking mutation on this room
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
