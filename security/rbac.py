from functools import wraps
from flask import g, jsonify

def is_admin() -> bool:
    user = getattr(g, "user", None)
    return bool(user and user.is_admin)

def admin_required(fn):
    """
    Usage: @admin_required
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        if not is_admin():
            return jsonify(error="Forbidden"), 403
        return fn(*args, **kwargs)
    return wrapper
