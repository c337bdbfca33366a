from flask import Blueprint, request, jsonify, current_app, g

from security.rbac import admin_required, is_admin
from services.errors import SlotUnavailable
from services.interval import parse_instant
from utils.auth_context import login_required
from utils.audit import log_event

booking_bp = Blueprint("booking", __name__)

def _service():
    return current_app.extensions["reservations"]

def _iso(dt):
    # stored as naive UTC
    return dt.isoformat() + "Z" if dt else None

def _booking_json(b):
    return {
        "id": b.id,
        "user_id": b.user_id,
        "room_id": b.room_id,
        "room_name": b.room.name if b.room else None,
        "start_time": _iso(b.start_time),
        "end_time": _iso(b.end_time),
        "note": b.note,
        "status": b.status,
        "created_at": _iso(b.created_at),
        "updated_at": _iso(b.updated_at),
    }

def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None

def _read_note(data):
    # "" is kept so a reschedule can clear the note; None means "not given"
    note = data.get("note", data.get("notes"))
    if note is None:
        return None, None
    if not isinstance(note, str):
        return None, "note must be a string"
    return note.strip(), None

def _can_view_user(user_id):
    return user_id == g.user.id or is_admin()


# ---------- availability ----------
@booking_bp.get("/bookings/check-availability")
@login_required
def check_availability():
    room_id = request.args.get("room_id", type=int)
    start_time = request.args.get("start_time")
    end_time = request.args.get("end_time")
    if not room_id or not start_time or not end_time:
        return jsonify(error="room_id, start_time, end_time are required"), 400

    available = _service().check_availability(room_id, parse_instant(start_time), parse_instant(end_time))
    return jsonify(available=available), 200


# ---------- listings ----------
@booking_bp.get("/bookings")
@login_required
def list_bookings():
    # optional filters: room_id, user_id
    room_id = request.args.get("room_id", type=int)
    user_id = request.args.get("user_id", type=int)
    if user_id is not None and not _can_view_user(user_id):
        return jsonify(error="Not authorized to access other users' bookings"), 403

    rows = _service().list_bookings(room_id=room_id, user_id=user_id)
    return jsonify([_booking_json(b) for b in rows]), 200


@booking_bp.get("/bookings/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    booking = _service().get_booking(booking_id)
    return jsonify(_booking_json(booking)), 200


@booking_bp.get("/users/<int:user_id>/bookings")
@login_required
def user_bookings(user_id: int):
    if not _can_view_user(user_id):
        return jsonify(error="Not authorized to access other users' bookings"), 403

    rows = _service().list_bookings(user_id=user_id)
    return jsonify([_booking_json(b) for b in rows]), 200


# ---------- create (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("/bookings")
@login_required
def create_booking():
    data = _json_body()
    if data is None:
        return jsonify(error="Request body must be a JSON object"), 400
    room_id = data.get("room_id")
    start_time = data.get("start_time")
    end_time = data.get("end_time")

    if not room_id or not start_time or not end_time:
        return jsonify(error="room_id, start_time, end_time are required"), 400
    try:
        room_id = int(room_id)
    except (TypeError, ValueError):
        return jsonify(error="room_id must be an integer"), 400

    note, note_error = _read_note(data)
    if note_error:
        return jsonify(error=note_error), 400

    start = parse_instant(start_time)
    end = parse_instant(end_time)
    try:
        booking = _service().create_booking(g.user.id, room_id, start, end, note=note)
    except SlotUnavailable:
        log_event(
            "BOOKING_FAIL_UNAVAILABLE", user_id=g.user.id, entity="room", entity_id=room_id,
            metadata={"start_time": start_time, "end_time": end_time},
        )
        raise

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=booking.id, metadata={"room_id": room_id})
    return jsonify(_booking_json(booking)), 201


# ---------- cancel / reschedule ----------
@booking_bp.delete("/bookings/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    _service().cancel_booking(g.user.id, booking_id)

    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return "", 204


@booking_bp.post("/bookings/<int:booking_id>/reschedule")
@login_required
def reschedule_booking(booking_id: int):
    data = _json_body()
    if data is None:
        return jsonify(error="Request body must be a JSON object"), 400
    start_time = data.get("start_time")
    end_time = data.get("end_time")
    if not start_time or not end_time:
        return jsonify(error="start_time, end_time are required"), 400

    note, note_error = _read_note(data)
    if note_error:
        return jsonify(error=note_error), 400

    booking = _service().reschedule_booking(
        g.user.id, booking_id, parse_instant(start_time), parse_instant(end_time), note=note,
    )

    log_event(
        "BOOKING_RESCHEDULE", user_id=g.user.id, entity="booking", entity_id=booking.id,
        metadata={"replaces": booking_id},
    )
    return jsonify(_booking_json(booking)), 201


# ---------- ADMIN: cancel any booking ----------
@booking_bp.post("/bookings/<int:booking_id>/admin-cancel")
@admin_required
def admin_cancel_booking(booking_id: int):
    data = _json_body()
    if data is None:
        return jsonify(error="Request body must be a JSON object"), 400
    reason = data.get("reason")
    reason = (reason.strip() if isinstance(reason, str) else "") or "Admin cancellation"

    _service().admin_cancel_booking(booking_id, reason)

    log_event("ADMIN_BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking_id, metadata={"reason": reason})
    return jsonify(message="Cancelled by admin"), 200
