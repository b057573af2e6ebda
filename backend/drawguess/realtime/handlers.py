from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, close_room, join_room, leave_room

from ..game import service
from ..game.directory import RoomDirectory
from ..game.errors import GameError, InvalidPayload, NotAuthorized, PhaseMismatch, RoomNotFound
from ..game.models import Capability, Phase, Room
from ..game.projector import project
from ..game.registry import ConnectionRegistry
from ..game.timer import RoundTimer, restart_timer
from . import events
from .events import Emission

logger = logging.getLogger(__name__)


def _validate_name(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    n = name.strip()
    if not n:
        return False
    if len(n) > 16:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _args(args: tuple, *keys: str) -> list[Any]:
    """Read handler arguments.

    Clients send positional arguments (``emit("join-room", code, name, kind)``);
    a single dict keyed by argument name is accepted as well.
    """
    if len(args) == 1 and isinstance(args[0], dict):
        payload = args[0]
        return [payload.get(k) for k in keys]
    values = list(args[: len(keys)])
    return values + [None] * (len(keys) - len(values))


def register_socketio_handlers(
    socketio: SocketIO,
    directory: RoomDirectory,
    registry: ConnectionRegistry,
    config=None,
) -> None:
    config = config or {}
    min_players = int(config.get("MIN_PLAYERS", service.MIN_PLAYERS))
    drawer_points = int(config.get("DRAWER_POINTS", service.DRAWER_POINTS))
    guesser_points = int(config.get("GUESSER_POINTS", service.GUESSER_POINTS))
    tick_interval = float(config.get("TICK_INTERVAL_SEC", 1.0))

    def _emit(event: str, args: tuple, **kwargs) -> None:
        # Several arguments travel as a tuple so clients receive them positionally.
        if not args:
            socketio.emit(event, **kwargs)
        elif len(args) == 1:
            socketio.emit(event, args[0], **kwargs)
        else:
            socketio.emit(event, tuple(args), **kwargs)

    def _dispatch(room: Room, sid: str | None, emissions: list[Emission]) -> None:
        for e in emissions:
            if e.target == "sender":
                if sid:
                    _emit(e.event, e.args, to=sid)
            elif e.target == "others":
                _emit(e.event, e.args, to=room.code, skip_sid=sid)
            else:
                _emit(e.event, e.args, to=room.code)

    def _guarded(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args):
            try:
                return fn(*args)
            except PhaseMismatch as exc:
                # Benign client/server races, e.g. a guess landing just after the round ended.
                logger.info("%s ignored for %s: %s", fn.__name__, request.sid, exc.message)
            except GameError as exc:
                logger.info("%s rejected for %s: %s", fn.__name__, request.sid, exc)
                _emit(exc.event, (exc.payload(),), to=request.sid)
            return None

        return wrapper

    def _mutate(room_code: Any, mutator: Callable[[Room], list[Emission]]) -> Room:
        """Resolve the room and apply one mutation under its lock."""
        room = directory.lookup(room_code)
        with room.lock:
            if directory.get(room.code) is not room:
                # Deleted while we waited for the lock.
                raise RoomNotFound(f"Room {room_code!r} not found")
            emissions = mutator(room)
            _dispatch(room, request.sid, emissions)
        return room

    def _on_tick(timer: RoundTimer) -> bool:
        room = directory.get(timer.room_code)
        if room is None:
            return False
        with room.lock:
            if room.timer is not timer or timer.cancelled:
                # A newer timer owns the room, or the round already ended.
                return False
            emissions = service.tick(room)
            _dispatch(room, None, emissions)
            return room.timer is timer

    def _leave(sid: str, room_code: str, connected: bool = True) -> None:
        room = directory.get(room_code)
        registry.unbind(sid, room_code)
        if room is None:
            return
        with room.lock:
            emissions = service.remove_player(room, sid)
            if connected:
                leave_room(room.code, sid=sid)
            _dispatch(room, sid, emissions)
        if directory.delete_if_empty(room.code):
            logger.info("room %s closed, last player %s left", room.code, sid)

    def _leave_current(sid: str) -> None:
        current = registry.room_of(sid)
        if current:
            _leave(sid, current)

    @socketio.on("connect")
    def on_connect(auth=None):
        registry.connect(request.sid)
        logger.info("connected: %s", request.sid)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        sid = request.sid
        room_code = registry.disconnect(sid)
        logger.info("disconnected: %s (room %s)", sid, room_code)
        if room_code:
            _leave(sid, room_code, connected=False)

    @socketio.on(events.CREATE_ROOM)
    @_guarded
    def create_room(*args):
        name, capability_raw = _args(args, "displayName", "capability")
        if not _validate_name(name):
            raise InvalidPayload("Invalid display name", event=events.ROOM_CREATION_DENIED)

        capability = Capability.parse(capability_raw)
        if capability is None:
            raise InvalidPayload("Unknown device capability", event=events.ROOM_CREATION_DENIED)
        if capability is not Capability.DRAWER_CAPABLE:
            raise NotAuthorized(
                "Only drawing devices can create rooms",
                event=events.ROOM_CREATION_DENIED,
            )

        sid = request.sid
        _leave_current(sid)

        room = directory.create_room(host_id=sid)
        with room.lock:
            service.add_player(room, sid, name.strip(), capability)
            join_room(room.code)
            registry.bind(sid, room.code)
            _emit(events.ROOM_CREATED, (room.code, project(room)), to=sid)

    @socketio.on(events.JOIN_ROOM)
    @_guarded
    def join_room_event(*args):
        room_code, name, capability_raw = _args(args, "roomCode", "displayName", "capability")
        if not _validate_name(name):
            raise InvalidPayload("Invalid display name")
        capability = Capability.parse(capability_raw)
        if capability is None:
            raise InvalidPayload("Unknown device capability")

        sid = request.sid
        previous = registry.room_of(sid)

        def _join(r: Room) -> list[Emission]:
            emissions = service.add_player(r, sid, name.strip(), capability)
            join_room(r.code)
            registry.bind(sid, r.code)
            return emissions

        # The old room is only left once the new one has accepted the caller.
        room = _mutate(room_code, _join)
        if previous and previous != room.code:
            _leave(sid, previous)

    @socketio.on(events.LEAVE_ROOM)
    @_guarded
    def leave_room_event(*args):
        (room_code,) = _args(args, "roomCode")
        room = directory.lookup(room_code)
        _leave(request.sid, room.code)

    @socketio.on(events.START_GAME)
    @_guarded
    def start_game(*args):
        (room_code,) = _args(args, "roomCode")
        _mutate(room_code, lambda room: service.start_round(room, request.sid, min_players=min_players))

    @socketio.on(events.SELECT_WORD)
    @_guarded
    def select_word(*args):
        room_code, word = _args(args, "roomCode", "word")
        if not isinstance(word, str):
            raise InvalidPayload("Word must be text", event=events.WORD_SELECTION_DENIED)

        def _select(room: Room) -> list[Emission]:
            emissions = service.select_word(room, request.sid, word)
            if room.phase is Phase.DRAWING:
                restart_timer(room, socketio, _on_tick, interval=tick_interval)
            return emissions

        _mutate(room_code, _select)

    @socketio.on(events.DRAWING_DATA)
    @_guarded
    def drawing_data(*args):
        room_code, stroke_data = _args(args, "roomCode", "strokePayload")
        _mutate(room_code, lambda room: service.update_drawing(room, request.sid, stroke_data))

    @socketio.on(events.SUBMIT_GUESS)
    @_guarded
    def submit_guess(*args):
        room_code, text = _args(args, "roomCode", "text")
        if not isinstance(text, str) or not text.strip():
            raise InvalidPayload("Guess must be non-empty text")

        _mutate(
            room_code,
            lambda room: service.submit_guess(
                room,
                request.sid,
                text,
                drawer_points=drawer_points,
                guesser_points=guesser_points,
            ),
        )

    @socketio.on(events.CONTINUE_NEXT_ROUND)
    @_guarded
    def continue_next_round(*args):
        (room_code,) = _args(args, "roomCode")
        _mutate(room_code, lambda room: service.continue_to_next_round(room, request.sid))

    @socketio.on(events.CANCEL_GAME)
    @_guarded
    def cancel_game(*args):
        (room_code,) = _args(args, "roomCode")

        def _cancel(room: Room) -> list[Emission]:
            emissions = service.cancel(room, request.sid)
            # Broadcast before closing so every member still hears about it.
            _dispatch(room, request.sid, emissions)
            close_room(room.code)
            for member_id in list(room.players):
                registry.unbind(member_id, room.code)
            room.players.clear()
            directory.delete(room.code)
            return []

        _mutate(room_code, _cancel)

    @socketio.on_error_default
    def on_error(exc):
        logger.error("unhandled error in socket event from %s", getattr(request, "sid", None), exc_info=exc)
