from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    directory = current_app.extensions["room_directory"]
    registry = current_app.extensions["connection_registry"]
    return jsonify({"ok": True, "rooms": len(directory), "connections": len(registry)})
