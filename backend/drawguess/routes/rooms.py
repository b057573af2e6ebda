from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.projector import project

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = current_app.extensions["room_directory"].get(code)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(project(room))
