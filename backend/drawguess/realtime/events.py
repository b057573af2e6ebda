from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


# Inbound (client -> server)
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
START_GAME = "start-game"
SELECT_WORD = "select-word"
DRAWING_DATA = "drawing-data"
SUBMIT_GUESS = "submit-guess"
CONTINUE_NEXT_ROUND = "continue-next-round"
CANCEL_GAME = "cancel-game"

# Outbound (server -> clients)
ROOM_CREATED = "room-created"
ROOM_JOINED = "room-joined"
ROOM_NOT_FOUND = "room-not-found"
ROOM_FULL = "room-full"
ROOM_CREATION_DENIED = "room-creation-denied"
JOIN_DENIED = "join-denied"
PLAYER_JOINED = "player-joined"
PLAYER_LEFT = "player-left"
GAME_STARTED = "game-started"
GAME_START_DENIED = "game-start-denied"
WORD_SELECTED = "word-selected"
WORD_SELECTION_DENIED = "word-selection-denied"
DRAWING_UPDATE = "drawing-update"
DRAWING_DENIED = "drawing-denied"
GUESS_SUBMITTED = "guess-submitted"
GUESS_DENIED = "guess-denied"
CORRECT_GUESS = "correct-guess"
TIMER_UPDATE = "timer-update"
ROUND_FINISHED = "round-finished"
ROUND_ENDED = "round-ended"
CONTINUE_TO_WORD_SELECTION = "continue-to-word-selection"
CONTINUE_DENIED = "continue-denied"
GAME_OVER = "game-over"
GAME_CANCELLED = "game-cancelled"
CANCEL_DENIED = "cancel-denied"
ERROR = "error"


Target = Literal["room", "others", "sender"]


@dataclass(frozen=True)
class Emission:
    """One outbound message produced by a room mutation.

    ``room`` goes to every member, ``others`` skips the caller, ``sender`` is
    directed to the caller only.
    """

    event: str
    args: tuple[Any, ...] = ()
    target: Target = "room"


def to_room(event: str, *args: Any) -> Emission:
    return Emission(event, args, "room")


def to_others(event: str, *args: Any) -> Emission:
    return Emission(event, args, "others")


def to_sender(event: str, *args: Any) -> Emission:
    return Emission(event, args, "sender")
