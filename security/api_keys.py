import hashlib
import secrets
from datetime import datetime
from flask import request, current_app

from models import db
from models.api_key import ApiKey
from models.user import User

def _hash_key(raw_key: str) -> str:
    # SHA-256 is fine for hashing random API keys
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()

def create_api_key(user_id: int, name: str = None) -> str:
    """
    Creates an API key for a user and returns the RAW key.
    Only the hash (and a short prefix for display) is stored in DB.
    """
    prefix = current_app.config.get("API_KEY_PREFIX", "pb_")
    raw_key = prefix + secrets.token_urlsafe(32)

    row = ApiKey(
        user_id=user_id,
        key_hash=_hash_key(raw_key),
        key_prefix=raw_key[:8],
        name=name,
    )
    db.session.add(row)
    db.session.commit()
    return raw_key

def get_key_from_request():
    header = current_app.config.get("API_KEY_HEADER", "X-API-Key")
    raw_key = request.headers.get(header)
    if raw_key:
        return raw_key.strip()

    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None

def resolve_api_key(raw_key: str):
    if not raw_key:
        return None

    row = ApiKey.query.filter_by(key_hash=_hash_key(raw_key)).first()
    if not row:
        return None

    row.last_used_at = datetime.utcnow()
    db.session.commit()

    return db.session.get(User, row.user_id)
