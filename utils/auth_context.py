from functools import wraps
from flask import g, jsonify
from security.api_keys import get_key_from_request, resolve_api_key

def load_current_user():
    # Identity comes from the login collaborator as an API key; we only map it to a user.
    g.user = resolve_api_key(get_key_from_request())

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
