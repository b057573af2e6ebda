from __future__ import annotations

import logging
from typing import Callable

from .models import Room

logger = logging.getLogger(__name__)


class RoundTimer:
    """Fixed-interval countdown bound to one room.

    The loop runs as a Socket.IO background task so it cooperates with
    whatever async mode the server uses (threading or eventlet). ``on_tick``
    receives the timer itself and returns False to stop the loop.
    """

    def __init__(
        self,
        room_code: str,
        on_tick: Callable[["RoundTimer"], bool],
        socketio,
        interval: float = 1.0,
    ) -> None:
        self.room_code = room_code
        self.interval = interval
        self._on_tick = on_tick
        self._socketio = socketio
        self._cancelled = False
        self.ticks = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> "RoundTimer":
        self._socketio.start_background_task(self._run)
        return self

    def cancel(self) -> None:
        self._cancelled = True

    def _run(self) -> None:
        while not self._cancelled:
            self._socketio.sleep(self.interval)
            if self._cancelled:
                break
            self.ticks += 1
            try:
                keep_going = self._on_tick(self)
            except Exception:
                logger.exception("tick failed for room %s", self.room_code)
                break
            if not keep_going:
                break
        logger.debug("timer for room %s stopped after %d ticks", self.room_code, self.ticks)


def stop_timer(room: Room) -> None:
    with room.lock:
        if room.timer is not None:
            room.timer.cancel()
            room.timer = None


def restart_timer(
    room: Room,
    socketio,
    on_tick: Callable[[RoundTimer], bool],
    interval: float = 1.0,
) -> RoundTimer:
    """Cancel whatever timer the room holds and start a fresh one."""
    with room.lock:
        stop_timer(room)
        timer = RoundTimer(room.code, on_tick, socketio, interval=interval)
        room.timer = timer
        timer.start()
        logger.info("timer started for room %s (%ss)", room.code, room.time_left)
        return timer
