"""Heuristic anomaly labelling of a single node transition."""

from __future__ import annotations

from enum import Enum

from fsa_anomaly_lab.fsa.model import Event, State


class AnomalyLabel(Enum):
    FORBIDDEN_TRANSITION = "forbidden_transition"
    EXCESSIVE_TIMEOUTS = "excessive_timeouts"
    PACKET_LOSS_STORM = "packet_loss_storm"
    DDOS_SUSPICION = "ddos_suspicion"
    ISOLATION_RISK = "isolation_risk"

    @property
    def display(self) -> str:
        return _DISPLAY[self]


_DISPLAY = {
    AnomalyLabel.FORBIDDEN_TRANSITION: "Forbidden transition",
    AnomalyLabel.EXCESSIVE_TIMEOUTS: "Excessive timeouts",
    AnomalyLabel.PACKET_LOSS_STORM: "Packet loss storm",
    AnomalyLabel.DDOS_SUSPICION: "DDoS suspicion",
    AnomalyLabel.ISOLATION_RISK: "Isolation risk",
}

_EVENT_LABELS = {
    Event.PING_TIMEOUT: AnomalyLabel.EXCESSIVE_TIMEOUTS,
    Event.PACKET_LOSS_HIGH: AnomalyLabel.PACKET_LOSS_STORM,
    Event.SUSPICIOUS_TRAFFIC: AnomalyLabel.DDOS_SUSPICION,
}


def classify(
    previous_state: State,
    next_state: State,
    event: Event,
    was_defined: bool,
) -> tuple[AnomalyLabel, ...]:
    """Label a transition. Every rule is evaluated; output order is rule order."""
    labels: list[AnomalyLabel] = []

    if not was_defined:
        labels.append(AnomalyLabel.FORBIDDEN_TRANSITION)

    event_label = _EVENT_LABELS.get(event)
    if event_label is not None:
        labels.append(event_label)

    # Stuck in failure
    if previous_state is State.ERROR and next_state is State.ERROR:
        labels.append(AnomalyLabel.ISOLATION_RISK)

    return tuple(labels)
