from __future__ import annotations

import logging
from typing import Any

from ..realtime import events
from ..realtime.events import Emission, to_others, to_room, to_sender
from .errors import InvalidPayload, NotAuthorized, PhaseMismatch, PreconditionFailed, RoomFull
from .models import Capability, Guess, Phase, Player, Room
from .projector import guess_payload, project
from .timer import stop_timer

logger = logging.getLogger(__name__)


DRAWER_POINTS = 10
GUESSER_POINTS = 15
MIN_PLAYERS = 2


def _normalize_guess(text: str) -> str:
    return text.strip().casefold()


def _require_phase(room: Room, phase: Phase, action: str) -> None:
    if room.phase is not phase:
        raise PhaseMismatch(f"{action} not allowed while {room.phase.value}")


def _reset_round_state(room: Room) -> None:
    room.word = ""
    room.drawing_data = None
    room.guesses = []
    room.round_locked = False
    room.time_left = room.round_duration_sec


def add_player(room: Room, socket_id: str, name: str, capability: Capability) -> list[Emission]:
    with room.lock:
        if socket_id in room.players:
            player = room.players[socket_id]
            player.name = name
            return [to_sender(events.ROOM_JOINED, project(room))]

        if room.is_full:
            raise RoomFull(f"Room {room.code} is full")

        if capability is Capability.DRAWER_CAPABLE and room.drawer_capable_member() is not None:
            raise NotAuthorized(
                "Room already has a drawing device",
                code="drawer_already_present",
                event=events.JOIN_DENIED,
            )

        player = Player(id=socket_id, name=name, capability=capability)
        room.players[socket_id] = player

        # The host is always the drawing device; a new one inherits an orphaned room.
        if player.can_draw and room.host_id not in room.players:
            room.host_id = socket_id

        state = project(room)
        return [
            to_sender(events.ROOM_JOINED, state),
            to_others(events.PLAYER_JOINED, state),
        ]


def remove_player(room: Room, socket_id: str) -> list[Emission]:
    with room.lock:
        if room.players.pop(socket_id, None) is None:
            return []

        if room.drawer_id == socket_id:
            # Drawer gone: nobody can finish the round.
            stop_timer(room)
            room.phase = Phase.WAITING
            room.drawer_id = None
            room.word = ""
            room.drawing_data = None
            for player in room.players.values():
                player.is_drawing = False
            logger.info("room %s reset to waiting, drawer %s left", room.code, socket_id)

        if not room.players:
            stop_timer(room)
            return []

        return [to_room(events.PLAYER_LEFT, project(room))]


def start_round(room: Room, socket_id: str, min_players: int = MIN_PLAYERS) -> list[Emission]:
    with room.lock:
        player = room.players.get(socket_id)
        if player is None or not player.can_draw:
            raise NotAuthorized(
                "Only the drawing device can start the game",
                event=events.GAME_START_DENIED,
            )

        _require_phase(room, Phase.WAITING, "start-game")

        if len(room.players) < min_players:
            raise PreconditionFailed(
                f"At least {min_players} players are needed to start",
                code="not_enough_players",
                event=events.GAME_START_DENIED,
            )

        drawer = room.drawer_capable_member()
        if drawer is None:
            raise PreconditionFailed(
                "No drawing device in the room",
                code="no_drawer",
                event=events.GAME_START_DENIED,
            )

        stop_timer(room)
        room.round += 1
        _reset_round_state(room)
        room.drawer_id = drawer.id
        for p in room.players.values():
            p.is_drawing = p.id == drawer.id
        room.phase = Phase.WORD_SELECTION

        logger.info("room %s round %d started, drawer %s", room.code, room.round, drawer.id)
        return [to_room(events.GAME_STARTED, project(room))]


def select_word(room: Room, socket_id: str, word: str) -> list[Emission]:
    with room.lock:
        if room.drawer_id is None:
            # No round yet: nobody holds the drawer role to authorize against.
            _require_phase(room, Phase.WORD_SELECTION, "select-word")
        if socket_id != room.drawer_id:
            raise NotAuthorized(
                "Only the drawer can select the word",
                event=events.WORD_SELECTION_DENIED,
            )

        _require_phase(room, Phase.WORD_SELECTION, "select-word")

        w = (word or "").strip()
        if not w:
            raise InvalidPayload("Word must not be empty", event=events.WORD_SELECTION_DENIED)

        stop_timer(room)
        room.word = w
        room.drawing_data = None
        room.round_locked = False
        room.time_left = room.round_duration_sec
        room.phase = Phase.DRAWING

        logger.info("room %s word selected, drawing for %ss", room.code, room.time_left)
        return [to_room(events.WORD_SELECTED, project(room))]


def update_drawing(room: Room, socket_id: str, stroke_data: Any) -> list[Emission]:
    with room.lock:
        if room.drawer_id is None:
            _require_phase(room, Phase.DRAWING, "drawing-data")
        if socket_id != room.drawer_id:
            raise NotAuthorized("Only the drawer can draw", event=events.DRAWING_DENIED)

        _require_phase(room, Phase.DRAWING, "drawing-data")

        # Latest wins: each update replaces the whole buffer.
        room.drawing_data = stroke_data
        return [to_others(events.DRAWING_UPDATE, stroke_data)]


def submit_guess(
    room: Room,
    socket_id: str,
    text: str,
    drawer_points: int = DRAWER_POINTS,
    guesser_points: int = GUESSER_POINTS,
) -> list[Emission]:
    """Record a guess and score it.

    A correct guess produces two separate broadcasts: ``correct-guess`` with
    the state as it was while still drawing, then ``round-finished`` once the
    phase has flipped. Clients tell a solved round from a timeout by that
    sequence, so the two must never be merged.
    """
    with room.lock:
        guesser = room.players.get(socket_id)
        if guesser is None:
            raise NotAuthorized("Not a member of this room", event=events.GUESS_DENIED)
        if socket_id == room.drawer_id:
            raise NotAuthorized("The drawer cannot guess", event=events.GUESS_DENIED)

        _require_phase(room, Phase.DRAWING, "submit-guess")
        if room.round_locked:
            raise PhaseMismatch("round already solved")

        guess = Guess(player_id=socket_id, player_name=guesser.name, text=text)
        room.guesses.append(guess)

        if _normalize_guess(text) != _normalize_guess(room.word):
            return [to_room(events.GUESS_SUBMITTED, guess_payload(guess))]

        drawer = room.players.get(room.drawer_id) if room.drawer_id else None
        if drawer is not None:
            drawer.score += drawer_points
        guesser.score += guesser_points
        room.round_locked = True
        stop_timer(room)

        emissions = [to_room(events.CORRECT_GUESS, guess_payload(guess), project(room))]

        room.phase = Phase.FINISHED
        emissions.append(to_room(events.ROUND_FINISHED, project(room)))

        logger.info("room %s round %d solved by %s", room.code, room.round, socket_id)
        return emissions


def tick(room: Room) -> list[Emission]:
    with room.lock:
        if room.phase is not Phase.DRAWING:
            stop_timer(room)
            return []

        room.time_left = max(0, room.time_left - 1)
        emissions = [to_room(events.TIMER_UPDATE, room.time_left)]

        if room.time_left <= 0:
            stop_timer(room)
            room.phase = Phase.FINISHED
            emissions.append(to_room(events.ROUND_ENDED, project(room)))
            logger.info("room %s round %d timed out", room.code, room.round)

        return emissions


def continue_to_next_round(room: Room, socket_id: str) -> list[Emission]:
    with room.lock:
        if socket_id != room.host_id:
            raise NotAuthorized("Only the host can continue", event=events.CONTINUE_DENIED)

        _require_phase(room, Phase.FINISHED, "continue-next-round")

        stop_timer(room)
        if room.round >= room.max_rounds:
            room.phase = Phase.GAME_OVER
            room.word = ""
            logger.info("room %s game over after %d rounds", room.code, room.round)
            return [to_room(events.GAME_OVER, project(room))]

        room.round += 1
        _reset_round_state(room)
        room.phase = Phase.WORD_SELECTION
        return [to_room(events.CONTINUE_TO_WORD_SELECTION, project(room))]


def cancel(room: Room, socket_id: str) -> list[Emission]:
    """Host tears the room down. The caller must evict members and drop the room."""
    with room.lock:
        if socket_id != room.host_id:
            raise NotAuthorized("Only the host can cancel the game", event=events.CANCEL_DENIED)

        stop_timer(room)
        logger.info("room %s cancelled by host in phase %s", room.code, room.phase.value)
        return [to_room(events.GAME_CANCELLED, {"roomCode": room.code})]
