from datetime import datetime
from models.db import db
from services.interval import TimeInterval

CONFIRMED = "CONFIRMED"
CANCELLED = "CANCELLED"

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    room_id = db.Column(db.Integer, db.ForeignKey("rooms.id"), nullable=False)

    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    note = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=CONFIRMED)
    # status values: CONFIRMED, CANCELLED

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancel_reason = db.Column(db.String(120), nullable=True)

    room = db.relationship("Room")

    __table_args__ = (
        db.CheckConstraint("end_time > start_time", name="ck_booking_valid_range"),
        db.Index("ix_bookings_room_time", "room_id", "start_time", "end_time"),
    )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status == CONFIRMED
