from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


class Capability(str, enum.Enum):
    DRAWER_CAPABLE = "drawer-capable"
    VIEWER_ONLY = "viewer-only"

    @classmethod
    def parse(cls, raw: Any) -> "Capability | None":
        """Accepts the enum values and the legacy client names ("mobile"/"web")."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        value = raw.strip().lower()
        if value in (cls.DRAWER_CAPABLE.value, "mobile"):
            return cls.DRAWER_CAPABLE
        if value in (cls.VIEWER_ONLY.value, "web"):
            return cls.VIEWER_ONLY
        return None


class Phase(str, enum.Enum):
    WAITING = "waiting"
    WORD_SELECTION = "word-selection"
    DRAWING = "drawing"
    FINISHED = "finished"
    GAME_OVER = "game-over"


@dataclass
class Player:
    id: str
    name: str
    capability: Capability = Capability.VIEWER_ONLY
    score: int = 0
    is_drawing: bool = False
    joined_at_ms: int = field(default_factory=now_ms)

    @property
    def can_draw(self) -> bool:
        return self.capability is Capability.DRAWER_CAPABLE


@dataclass(frozen=True)
class Guess:
    player_id: str
    player_name: str
    text: str
    timestamp_ms: int = field(default_factory=now_ms)


@dataclass
class Room:
    code: str
    host_id: str
    phase: Phase = Phase.WAITING
    word: str = ""
    drawer_id: str | None = None
    drawing_data: Any = None
    guesses: list[Guess] = field(default_factory=list)
    round: int = 0
    max_rounds: int = 3
    max_players: int = 4
    round_duration_sec: int = 60
    time_left: int = 60
    round_locked: bool = False
    players: dict[str, Player] = field(default_factory=dict)
    created_at_ms: int = field(default_factory=now_ms)
    # RoundTimer handle; see game.timer
    timer: Any = field(default=None, repr=False, compare=False)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def drawer_capable_member(self) -> Player | None:
        for player in self.players.values():
            if player.can_draw:
                return player
        return None
