from datetime import datetime
from models.db import db

class ApiKey(db.Model):
    __tablename__ = "api_keys"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # store only hashed key in DB (raw key is shown once)
    key_hash = db.Column(db.String(128), unique=True, nullable=False, index=True)
    key_prefix = db.Column(db.String(8), nullable=False)
    name = db.Column(db.String(255), nullable=True)

    last_used_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", back_populates="api_keys")
