from __future__ import annotations

from ..realtime.events import ERROR, ROOM_FULL, ROOM_NOT_FOUND


class GameError(Exception):
    """Base for rejected room operations.

    ``event`` names the directed event sent back to the caller; ``code`` is the
    machine readable reason carried in its payload.
    """

    code = "game_error"
    event = ERROR

    def __init__(self, message: str = "", *, code: str | None = None, event: str | None = None):
        if code is not None:
            self.code = code
        if event is not None:
            self.event = event
        self.message = message or self.code
        super().__init__(f"[{self.code}] {self.message}")

    def payload(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidPayload(GameError):
    code = "invalid_payload"


class RoomNotFound(GameError):
    code = "room_not_found"
    event = ROOM_NOT_FOUND


class RoomFull(GameError):
    code = "room_full"
    event = ROOM_FULL


class NotAuthorized(GameError):
    code = "not_authorized"


class PreconditionFailed(GameError):
    code = "precondition_failed"


class PhaseMismatch(GameError):
    """Action arrived outside its phase. Dropped without telling the caller."""

    code = "phase_mismatch"
