"""Simulated node values and the per-node step of a tick."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from fsa_anomaly_lab.core.types import NodeId
from fsa_anomaly_lab.fsa.classifier import AnomalyLabel, classify
from fsa_anomaly_lab.fsa.health import HEALTH_PENALTY, MAX_HEALTH, next_health
from fsa_anomaly_lab.fsa.model import Event, State, resolve

if TYPE_CHECKING:
    from random import Random

    from fsa_anomaly_lab.fsa.generator import EventSampler


@dataclass(frozen=True)
class Node:
    """Current snapshot of one simulated node.

    ``anomalies`` holds only the labels from the most recent tick.
    """

    id: NodeId
    state: State = State.OK
    last_event: Event | None = None
    anomalies: tuple[AnomalyLabel, ...] = ()
    health: int = MAX_HEALTH

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "state": self.state.value,
            "severity": self.state.severity,
            "last_event": self.last_event.value if self.last_event is not None else None,
            "anomalies": [label.value for label in self.anomalies],
            "badges": [label.display for label in self.anomalies],
            "health": self.health,
        }


@dataclass(frozen=True)
class NodeOutcome:
    """Effect of one tick on one node, computed before anything is committed."""

    previous: Node
    node: Node
    event: Event

    @property
    def labels(self) -> tuple[AnomalyLabel, ...]:
        return self.node.anomalies

    @property
    def anomaly_count(self) -> int:
        return len(self.node.anomalies)


def advance_node(
    node: Node,
    rng: Random,
    sampler: EventSampler,
    health_penalty: int = HEALTH_PENALTY,
) -> NodeOutcome:
    event = sampler(node.state, rng)
    next_state, was_defined = resolve(node.state, event)
    labels = classify(node.state, next_state, event, was_defined)
    updated = replace(
        node,
        state=next_state,
        last_event=event,
        anomalies=labels,
        health=next_health(node.health, len(labels), health_penalty),
    )
    return NodeOutcome(previous=node, node=updated, event=event)


def build_registry(node_count: int) -> tuple[Node, ...]:
    """Fresh fleet: every node OK, no anomalies, full health."""
    return tuple(Node(id=NodeId(f"node-{i + 1}")) for i in range(node_count))
