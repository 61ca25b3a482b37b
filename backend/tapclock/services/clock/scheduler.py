import logging
import time
from typing import Callable, List, Optional

from .clock import advance, finish_if_over, now_ms


class TickScheduler:
    """Single global sweep that advances every running room's clock.

    One background task iterates the registry each tick; rooms never get a
    timer of their own. The sweep is the only place where elapsed wall-clock
    time enters a room without a player action.
    """

    def __init__(self, registry, gateway, interval: float = 0.5,
                 clock: Callable[[], int] = now_ms, logger: Optional[logging.Logger] = None,
                 heartbeat_sec: int = 0):
        self.registry = registry
        self.gateway = gateway
        self.interval = interval
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.heartbeat_sec = heartbeat_sec
        self._running = False
        self._generation = 0
        self._socketio = None

    def init_app(self, app) -> None:
        self.interval = float(app.config.get('TICK_INTERVAL_SEC', self.interval))
        try:
            self.heartbeat_sec = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
        except Exception:
            self.heartbeat_sec = 0
        self.logger = app.logger
        self.stop()

    def sweep(self, now: Optional[int] = None) -> List[str]:
        """Advance, settle and broadcast every running room once.

        A failure in one room is logged and does not stop the others.
        Returns the ids of the rooms that were ticked.
        """
        ticked = []
        for room in self.registry.rooms():
            with self.registry.lock:
                state = room.state
                if not state.running:
                    continue
                try:
                    advance(state, self.clock() if now is None else now)
                    if finish_if_over(state):
                        self.logger.info(f"[game-over] room={room.room_id} winner={state.winner_index}")
                    self.gateway.broadcast(room)
                except Exception:
                    self.logger.exception(f"[tick-error] room={room.room_id}")
                    continue
                ticked.append(room.room_id)
        return ticked

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, socketio) -> None:
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._socketio = socketio
        self.logger.info(f"[tick-start] interval={self.interval}s")
        socketio.start_background_task(self._worker, self._generation)

    def ensure_started(self, socketio) -> None:
        if not self._running:
            self.start(socketio)

    def stop(self) -> None:
        self._running = False

    def _worker(self, generation: int) -> None:
        last_heartbeat = time.time()
        # A restarted scheduler bumps the generation so a stale worker exits
        while self._running and generation == self._generation:
            try:
                self.sweep()
            except Exception:
                self.logger.exception("[tick-error] sweep failed")
            if self.heartbeat_sec and self.heartbeat_sec > 0 and time.time() - last_heartbeat >= self.heartbeat_sec:
                last_heartbeat = time.time()
                rooms = self.registry.rooms()
                running = sum(1 for r in rooms if r.state.running)
                self.logger.info(f"[tick-heartbeat] rooms={len(rooms)} running={running}")
            self._socketio.sleep(self.interval)
        self.logger.info("[tick-stop]")
