from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    # nullable for events raised outside a user's request
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    # BOOKING_CREATE, BOOKING_FAIL_UNAVAILABLE, BOOKING_CANCEL, BOOKING_RESCHEDULE,
    # ADMIN_BOOKING_CANCEL, API_KEY_CREATE
    action = db.Column(db.String(80), nullable=False, index=True)
    entity = db.Column(db.String(80), nullable=True)   # booking, room, api_key
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
