"""Single-writer simulation context shared by the clock and the API layer."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from random import Random
from typing import TYPE_CHECKING

import coolname.impl

from fsa_anomaly_lab.config import SimulationConfig, clamp_node_count, speed_to_interval_ms
from fsa_anomaly_lab.core.clock import SimulationClock
from fsa_anomaly_lab.core.state import initial_state, tick
from fsa_anomaly_lab.core.types import RunId
from fsa_anomaly_lab.fsa.generator import sample_event

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from fsa_anomaly_lab.core.state import SimulationState
    from fsa_anomaly_lab.fsa.generator import EventSampler
    from fsa_anomaly_lab.metrics.results import SimulationSnapshot

logger = logging.getLogger(__name__)

type SnapshotListener = Callable[[SimulationSnapshot], object]


def generate_run_id(rng: Random) -> RunId:
    coolname.impl.replace_random(rng)
    words = coolname.impl.generate(3)
    return RunId("-".join(words))


class Simulation:
    """Owns the current ``SimulationState`` and serializes every mutation.

    All writes (clock ticks, manual steps, resets, speed changes) go through
    one lock and commit by swapping the state reference, so readers only
    ever observe whole ticks. Listeners are notified with a snapshot after
    each committed tick, outside the lock.

    Lifecycle calls (start, stop, reset, interval changes) additionally hold
    a separate lifecycle lock for their whole duration, so a reset cannot
    interleave with a concurrent start. Ticks never take that lock.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        sampler: EventSampler = sample_event,
    ) -> None:
        if config is None:
            config = SimulationConfig()

        self._config = config
        self._sampler = sampler
        self._lock = threading.RLock()
        self._lifecycle_lock = threading.Lock()
        self._listeners: list[SnapshotListener] = []
        self._clock = SimulationClock(
            on_tick=self.step,
            interval_ms=config.tick_interval_ms,
            on_halt=self._mark_stopped,
        )
        self._rng, self._state = self._fresh_run(config)

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def rng(self) -> Random:
        return self._rng

    @property
    def clock(self) -> SimulationClock:
        return self._clock

    @property
    def running(self) -> bool:
        return self._state.running

    def snapshot(self) -> SimulationSnapshot:
        return self._state.snapshot()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a per-tick listener. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def step(self, timestamp: datetime | None = None) -> SimulationSnapshot:
        """Advance the whole fleet by one tick and commit it atomically."""
        with self._lock:
            self._state = tick(self._state, self._rng, self._sampler, timestamp)
            snapshot = self._state.snapshot()
            listeners = list(self._listeners)

        logger.debug(
            "[%s] tick %d: %d anomalies",
            snapshot.run_id,
            snapshot.tick_count,
            snapshot.trend[-1].count if snapshot.trend else 0,
        )
        for listener in listeners:
            listener(snapshot)
        return snapshot

    def run_ticks(self, count: int) -> SimulationSnapshot:
        """Advance ``count`` ticks synchronously, without the clock."""
        snapshot = self.snapshot()
        for _ in range(count):
            snapshot = self.step()
        return snapshot

    def start(self) -> bool:
        """Start the clock. No-op if already running."""
        with self._lifecycle_lock:
            with self._lock:
                if not self._clock.start():
                    return False
                self._state = replace(self._state, running=True)
        logger.info("[%s] Simulation started", self._state.run_id)
        return True

    def stop(self) -> bool:
        """Stop issuing ticks. A tick already in progress still commits."""
        with self._lifecycle_lock:
            stopped = self._stop_clock()
        if stopped:
            logger.info("[%s] Simulation stopped", self._state.run_id)
        return stopped

    def set_interval_ms(self, interval_ms: float) -> None:
        with self._lifecycle_lock:
            self._clock.set_interval_ms(interval_ms)
            with self._lock:
                self._config = replace(self._config, tick_interval_ms=interval_ms)
                self._state = replace(self._state, tick_interval_ms=interval_ms)
        logger.info("[%s] Tick interval set to %.0fms", self._state.run_id, interval_ms)

    def set_speed(self, multiplier: float) -> None:
        self.set_interval_ms(speed_to_interval_ms(multiplier))

    def reset(self, node_count: object | None = None) -> SimulationSnapshot:
        """Stop the clock and start a fresh run. Does not restart the clock.

        ``node_count`` is clamped to at least 1; None keeps the current count.
        """
        with self._lifecycle_lock:
            self._stop_clock()
            with self._lock:
                if node_count is not None:
                    self._config = replace(
                        self._config, node_count=clamp_node_count(node_count)
                    )
                self._rng, self._state = self._fresh_run(self._config)
                snapshot = self._state.snapshot()
        logger.info("[%s] Reset with %d nodes", snapshot.run_id, snapshot.node_count)
        return snapshot

    def _stop_clock(self) -> bool:
        # Caller holds the lifecycle lock. The clock joins its worker, and the
        # worker takes the tick lock, so the tick lock must not be held here.
        stopped = self._clock.stop()
        self._mark_stopped()
        return stopped

    def _fresh_run(self, config: SimulationConfig) -> tuple[Random, SimulationState]:
        rng = Random(config.seed) if config.seed is not None else Random()
        run_id = generate_run_id(Random(rng.getrandbits(64)))
        return rng, initial_state(config, run_id)

    def _mark_stopped(self) -> None:
        with self._lock:
            if self._state.running:
                self._state = replace(self._state, running=False)
