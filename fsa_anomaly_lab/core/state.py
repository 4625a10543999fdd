"""Simulation aggregate root and the pure tick function."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fsa_anomaly_lab.config import BASE_TICK_INTERVAL_MS, LOG_CAPACITY, TREND_CAPACITY
from fsa_anomaly_lab.core.node import advance_node, build_registry
from fsa_anomaly_lab.fsa.generator import sample_event
from fsa_anomaly_lab.fsa.health import HEALTH_PENALTY, MAX_HEALTH, MIN_HEALTH
from fsa_anomaly_lab.metrics.aggregator import aggregate_tick
from fsa_anomaly_lab.metrics.results import SimulationSnapshot

if TYPE_CHECKING:
    from datetime import datetime
    from random import Random

    from fsa_anomaly_lab.config import SimulationConfig
    from fsa_anomaly_lab.core.node import Node
    from fsa_anomaly_lab.core.types import RunId
    from fsa_anomaly_lab.fsa.generator import EventSampler
    from fsa_anomaly_lab.metrics.results import LogEntry, TrendPoint


@dataclass(frozen=True)
class SimulationState:
    """Complete engine state for one run. Advanced only by ``tick``."""

    run_id: RunId
    nodes: tuple[Node, ...]
    log: tuple[LogEntry, ...] = ()  # newest first
    trend: tuple[TrendPoint, ...] = ()  # oldest first
    total_anomalies: int = 0
    total_events: int = 0
    tick_count: int = 0
    running: bool = False
    tick_interval_ms: float = BASE_TICK_INTERVAL_MS

    # Policy carried from the config that created the run
    log_capacity: int = LOG_CAPACITY
    trend_capacity: int = TREND_CAPACITY
    health_penalty: int = HEALTH_PENALTY

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            run_id=self.run_id,
            nodes=self.nodes,
            log=self.log,
            trend=self.trend,
            total_anomalies=self.total_anomalies,
            total_events=self.total_events,
            tick_count=self.tick_count,
            running=self.running,
            tick_interval_ms=self.tick_interval_ms,
        )


def initial_state(config: SimulationConfig, run_id: RunId) -> SimulationState:
    return SimulationState(
        run_id=run_id,
        nodes=build_registry(config.node_count),
        tick_interval_ms=config.tick_interval_ms,
        log_capacity=config.log_capacity,
        trend_capacity=config.trend_capacity,
        health_penalty=config.health_penalty,
    )


def tick(
    state: SimulationState,
    rng: Random,
    sampler: EventSampler = sample_event,
    timestamp: datetime | None = None,
) -> SimulationState:
    """Advance every node exactly once and return the next state.

    Every node is stepped from the pre-tick registry; the aggregate effect is
    folded in a single place afterwards.
    """
    outcomes = [advance_node(node, rng, sampler, state.health_penalty) for node in state.nodes]
    return aggregate_tick(state, outcomes, timestamp)


def validate_state(state: SimulationState) -> list[str]:
    """Report invariant violations. An empty list means the state is sound."""
    errors: list[str] = []

    ids = [node.id for node in state.nodes]
    if len(set(ids)) != len(ids):
        errors.append(f"duplicate node ids in registry: {ids}")

    for node in state.nodes:
        if not MIN_HEALTH <= node.health <= MAX_HEALTH:
            errors.append(f"{node.id} health {node.health} outside [{MIN_HEALTH}, {MAX_HEALTH}]")

    if len(state.log) > state.log_capacity:
        errors.append(f"log length {len(state.log)} > capacity {state.log_capacity}")

    if len(state.trend) > state.trend_capacity:
        errors.append(f"trend length {len(state.trend)} > capacity {state.trend_capacity}")

    if state.total_events != state.tick_count * len(state.nodes):
        errors.append(
            f"total_events ({state.total_events}) != "
            f"tick_count * node_count ({state.tick_count * len(state.nodes)})"
        )

    if state.total_anomalies < 0:
        errors.append(f"total_anomalies ({state.total_anomalies}) < 0")

    return errors
