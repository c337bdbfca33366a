from datetime import datetime
from models.db import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    # id from the OAuth provider, filled in by the login collaborator
    recurse_id = db.Column(db.Integer, unique=True, nullable=True)

    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    api_keys = db.relationship("ApiKey", back_populates="user", cascade="all, delete-orphan")
