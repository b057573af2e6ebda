from __future__ import annotations

from .models import Guess, Phase, Room


def guess_payload(guess: Guess) -> dict:
    return {
        "playerId": guess.player_id,
        "playerName": guess.player_name,
        "guess": guess.text,
        "timestamp": guess.timestamp_ms,
    }


def project(room: Room) -> dict:
    """Client-visible snapshot of a room.

    The secret word is only filled in while the room is drawing. Every other
    phase sends an empty string, including to the drawer, so a stale broadcast
    can never hand the answer to a guesser.
    """
    with room.lock:
        players = []
        for p in room.players.values():
            players.append(
                {
                    "id": p.id,
                    "name": p.name,
                    "capability": p.capability.value,
                    "score": p.score,
                    "isDrawing": p.is_drawing,
                    "joinedAt": p.joined_at_ms,
                }
            )

        return {
            "id": room.code,
            "code": room.code,
            "hostId": room.host_id,
            "createdAt": room.created_at_ms,
            "players": players,
            "currentWord": room.word if room.phase is Phase.DRAWING else "",
            "currentDrawer": room.drawer_id,
            "gameState": room.phase.value,
            "drawingData": room.drawing_data,
            "guesses": [guess_payload(g) for g in room.guesses],
            "timeLeft": room.time_left,
            "roundDurationSec": room.round_duration_sec,
            "rounds": room.round,
            "maxRounds": room.max_rounds,
            "roundLocked": room.round_locked,
            "scores": {p.id: p.score for p in room.players.values()},
        }