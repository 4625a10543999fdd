"""Log, trend and snapshot records handed to rendering collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from ..core.node import Node
    from ..core.types import NodeId, RunId
    from ..fsa.classifier import AnomalyLabel
    from ..fsa.model import Event, State


@dataclass(frozen=True)
class LogEntry:
    """One node mutation within a tick."""

    timestamp: datetime
    node_id: NodeId
    event: Event
    previous_state: State
    new_state: State
    labels: tuple[AnomalyLabel, ...] = ()

    def format(self) -> str:
        line = (
            f"[{self.timestamp.strftime('%H:%M:%S')}] {self.node_id}: {self.event.value} "
            f"({self.previous_state.value} → {self.new_state.value})"
        )
        if self.labels:
            line += " ⚠️"
        return line

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "node_id": self.node_id,
            "event": self.event.value,
            "previous_state": self.previous_state.value,
            "new_state": self.new_state.value,
            "labels": [label.value for label in self.labels],
            "line": self.format(),
        }


@dataclass(frozen=True)
class TrendPoint:
    """Total anomaly count across the fleet for one tick."""

    timestamp: datetime
    count: int

    def to_dict(self) -> dict[str, object]:
        return {"timestamp": self.timestamp.isoformat(), "count": self.count}


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of the engine taken between ticks."""

    run_id: RunId
    nodes: tuple[Node, ...]
    log: tuple[LogEntry, ...]  # newest first
    trend: tuple[TrendPoint, ...]  # oldest first
    total_anomalies: int
    total_events: int
    tick_count: int
    running: bool
    tick_interval_ms: float

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "node_count": self.node_count,
            "total_anomalies": self.total_anomalies,
            "total_events": self.total_events,
            "tick_count": self.tick_count,
            "running": self.running,
            "tick_interval_ms": self.tick_interval_ms,
            "nodes": [node.to_dict() for node in self.nodes],
            "log": [entry.to_dict() for entry in self.log],
            "trend": [point.to_dict() for point in self.trend],
        }
