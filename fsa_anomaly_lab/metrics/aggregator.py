"""Folds one tick's node outcomes into counters and rolling buffers."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fsa_anomaly_lab.metrics.results import LogEntry, TrendPoint

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fsa_anomaly_lab.core.node import NodeOutcome
    from fsa_anomaly_lab.core.state import SimulationState


def push_newest_first[T](buffer: tuple[T, ...], items: Sequence[T], capacity: int) -> tuple[T, ...]:
    """Prepend ``items`` in arrival order; the oldest entries fall off the end."""
    return (tuple(reversed(items)) + buffer)[:capacity]


def push_oldest_first[T](buffer: tuple[T, ...], items: Sequence[T], capacity: int) -> tuple[T, ...]:
    """Append ``items``; the oldest entries fall off the front."""
    merged = buffer + tuple(items)
    if len(merged) > capacity:
        merged = merged[len(merged) - capacity :]
    return merged


def log_entries(outcomes: Sequence[NodeOutcome], timestamp: datetime) -> list[LogEntry]:
    return [
        LogEntry(
            timestamp=timestamp,
            node_id=outcome.node.id,
            event=outcome.event,
            previous_state=outcome.previous.state,
            new_state=outcome.node.state,
            labels=outcome.labels,
        )
        for outcome in outcomes
    ]


def aggregate_tick(
    state: SimulationState,
    outcomes: Sequence[NodeOutcome],
    timestamp: datetime | None = None,
) -> SimulationState:
    """Commit a tick: new registry, N log entries, one trend point, counters.

    A trend point is recorded even when the tick produced no anomalies.
    """
    if timestamp is None:
        timestamp = datetime.now(UTC)

    anomaly_count = sum(outcome.anomaly_count for outcome in outcomes)

    return replace(
        state,
        nodes=tuple(outcome.node for outcome in outcomes),
        log=push_newest_first(state.log, log_entries(outcomes, timestamp), state.log_capacity),
        trend=push_oldest_first(
            state.trend,
            [TrendPoint(timestamp=timestamp, count=anomaly_count)],
            state.trend_capacity,
        ),
        total_events=state.total_events + len(outcomes),
        total_anomalies=state.total_anomalies + anomaly_count,
        tick_count=state.tick_count + 1,
    )
