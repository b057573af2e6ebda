from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock

from .models import now_ms

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    sid: str
    connected_at_ms: int = field(default_factory=now_ms)
    room_code: str | None = None


class ConnectionRegistry:
    """Transport connections and the room each one currently sits in.

    The Socket.IO sid is the player's identity; it lives as long as the
    connection does.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._connections: dict[str, Connection] = {}

    def connect(self, sid: str) -> Connection:
        with self._lock:
            conn = self._connections.get(sid)
            if conn is None:
                conn = Connection(sid=sid)
                self._connections[sid] = conn
            return conn

    def disconnect(self, sid: str) -> str | None:
        """Forget the connection. Returns the room code it was bound to."""
        with self._lock:
            conn = self._connections.pop(sid, None)
        return conn.room_code if conn else None

    def bind(self, sid: str, room_code: str) -> None:
        with self._lock:
            self.connect(sid).room_code = room_code

    def unbind(self, sid: str, room_code: str | None = None) -> None:
        with self._lock:
            conn = self._connections.get(sid)
            if conn is None:
                return
            if room_code is None or conn.room_code == room_code:
                conn.room_code = None

    def room_of(self, sid: str) -> str | None:
        with self._lock:
            conn = self._connections.get(sid)
            return conn.room_code if conn else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
