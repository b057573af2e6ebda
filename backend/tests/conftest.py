import pytest

from drawguess.config import Config
from drawguess.game.directory import RoomDirectory
from drawguess.game.models import Capability
from drawguess.game import service
from drawguess.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SOCKETIO_ASYNC_MODE = "threading"
    TRUST_PROXY_HEADERS = False
    # Keep round timers out of the way unless a test asks for them.
    TICK_INTERVAL_SEC = 3600.0
    ROUND_DURATION_SEC = 60
    MAX_ROUNDS = 3


class FastTimerConfig(TestConfig):
    TICK_INTERVAL_SEC = 0.05
    ROUND_DURATION_SEC = 2


class FakeTimer:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(app_and_socketio):
    app, socketio = app_and_socketio
    clients = []

    def _make():
        c = socketio.test_client(app, flask_test_client=app.test_client())
        c.get_received()
        clients.append(c)
        return c

    yield _make

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass


@pytest.fixture()
def directory():
    return RoomDirectory(round_duration_sec=60, max_rounds=3, max_players=4)


@pytest.fixture()
def room(directory):
    """Room hosted by drawer-capable "ava" with viewer "bea" joined."""
    r = directory.create_room(host_id="ava")
    service.add_player(r, "ava", "Ava", Capability.DRAWER_CAPABLE)
    service.add_player(r, "bea", "Bea", Capability.VIEWER_ONLY)
    return r


def names(received):
    return [pkt["name"] for pkt in received]


def first(received, name):
    for pkt in received:
        if pkt["name"] == name:
            return pkt
    raise AssertionError(f"{name!r} not in {names(received)}")
