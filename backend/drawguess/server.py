from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.directory import RoomDirectory
from .game.registry import ConnectionRegistry
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.words import bp as words_bp
from .realtime.handlers import register_socketio_handlers

logger = logging.getLogger(__name__)


def _default_async_mode() -> str:
    # Windows and Python >= 3.13: threading (eventlet has known compatibility issues there)
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = app.config.get("SOCKETIO_ASYNC_MODE") or _default_async_mode()

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    directory = RoomDirectory.from_config(app.config)
    registry = ConnectionRegistry()
    app.extensions["room_directory"] = directory
    app.extensions["connection_registry"] = registry

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(words_bp, url_prefix="/api")

    register_socketio_handlers(socketio, directory, registry, app.config)

    logger.info("drawguess app created (async_mode=%s)", async_mode)
    return app, socketio
