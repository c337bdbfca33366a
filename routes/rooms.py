from flask import Blueprint, jsonify, current_app

from utils.auth_context import login_required

rooms_bp = Blueprint("rooms", __name__, url_prefix="/rooms")

def _room_json(r):
    return {
        "id": r.id,
        "name": r.name,
        "description": r.description,
        "capacity": r.capacity,
    }

@rooms_bp.get("")
@login_required
def list_rooms():
    rooms = current_app.extensions["reservations"].list_rooms()
    return jsonify([_room_json(r) for r in rooms]), 200

@rooms_bp.get("/<int:room_id>")
@login_required
def get_room(room_id: int):
    room = current_app.extensions["reservations"].rooms.get_room(room_id)
    return jsonify(_room_json(room)), 200
