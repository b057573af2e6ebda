from __future__ import annotations

import logging
import uuid
from threading import RLock

from .errors import RoomNotFound
from .models import Room
from .timer import stop_timer

logger = logging.getLogger(__name__)


def normalize_code(code) -> str:
    if not isinstance(code, str):
        return ""
    return code.strip().lower()


class RoomDirectory:
    """Process-wide code -> Room table.

    One instance is created per app and handed to the socket handlers and the
    HTTP routes, so tests can run several independent directories.
    """

    def __init__(
        self,
        round_duration_sec: int = 60,
        max_rounds: int = 3,
        max_players: int = 4,
        code_length: int = 8,
    ) -> None:
        self.round_duration_sec = round_duration_sec
        self.max_rounds = max_rounds
        self.max_players = max_players
        self.code_length = code_length
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}

    @classmethod
    def from_config(cls, config) -> "RoomDirectory":
        return cls(
            round_duration_sec=int(config.get("ROUND_DURATION_SEC", 60)),
            max_rounds=int(config.get("MAX_ROUNDS", 3)),
            max_players=int(config.get("MAX_PLAYERS", 4)),
            code_length=int(config.get("ROOM_CODE_LENGTH", 8)),
        )

    def _new_code(self) -> str:
        return uuid.uuid4().hex[: self.code_length].lower()

    def create_room(self, host_id: str) -> Room:
        with self._lock:
            code = self._new_code()
            while code in self._rooms:
                code = self._new_code()

            room = Room(
                code=code,
                host_id=host_id,
                max_rounds=self.max_rounds,
                max_players=self.max_players,
                round_duration_sec=self.round_duration_sec,
                time_left=self.round_duration_sec,
            )
            self._rooms[code] = room
            logger.info("room %s created by %s", code, host_id)
            return room

    def get(self, code) -> Room | None:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def lookup(self, code) -> Room:
        room = self.get(code)
        if room is None:
            raise RoomNotFound(f"Room {code!r} not found")
        return room

    def delete(self, code) -> Room | None:
        with self._lock:
            room = self._rooms.pop(normalize_code(code), None)
        if room is not None:
            stop_timer(room)
            logger.info("room %s deleted", room.code)
        return room

    def delete_if_empty(self, code) -> bool:
        room = self.get(code)
        if room is None:
            return False
        # Room lock first, then directory lock: the order every mutation uses.
        with room.lock:
            with self._lock:
                if self._rooms.get(room.code) is not room or room.players:
                    return False
                del self._rooms[room.code]
            stop_timer(room)
        logger.info("room %s deleted (empty)", room.code)
        return True

    def __contains__(self, code) -> bool:
        return self.get(code) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)