"""Wall-clock tick scheduler."""

from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ClockState(Enum):
    STOPPED = auto()
    RUNNING = auto()


class SimulationClock:
    """Issues ticks from a single worker thread at a configurable cadence.

    Ticks never overlap: the worker calls ``on_tick`` synchronously and only
    waits for the next interval after it returns. ``stop`` is cooperative: it
    sets a flag checked between ticks and waits for a tick already in
    progress to finish.
    """

    def __init__(
        self,
        on_tick: Callable[[], object],
        interval_ms: float = 1000.0,
        on_halt: Callable[[], object] | None = None,
    ) -> None:
        self._on_tick = on_tick
        self._on_halt = on_halt
        self._interval_ms = interval_ms
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def state(self) -> ClockState:
        thread = self._thread
        if thread is not None and thread.is_alive() and not self._stop_event.is_set():
            return ClockState.RUNNING
        return ClockState.STOPPED

    @property
    def running(self) -> bool:
        return self.state is ClockState.RUNNING

    def set_interval_ms(self, interval_ms: float) -> None:
        """Takes effect when the worker next schedules a tick."""
        if interval_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval_ms}")
        self._interval_ms = interval_ms

    def start(self) -> bool:
        """Begin ticking. Returns False if the clock was already running."""
        with self._lock:
            if self.running:
                return False
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="fsa-clock",
                daemon=True,
            )
            self._thread.start()
        logger.info("Clock started (interval=%.0fms)", self._interval_ms)
        return True

    def stop(self) -> bool:
        """Halt future ticks. Returns False if the clock was not running."""
        with self._lock:
            thread, self._thread = self._thread, None
            if thread is None:
                return False
            self._stop_event.set()

        # A tick may call stop() on its own worker
        if thread is not threading.current_thread():
            thread.join()
        logger.info("Clock stopped")
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval_ms / 1000.0):
            try:
                self._on_tick()
            except Exception:
                logger.exception("Tick failed, halting clock")
                stop_event.set()
                if self._on_halt is not None:
                    self._on_halt()
                return
