"""Node health automaton, event generator, anomaly classifier and health model."""

from fsa_anomaly_lab.fsa.classifier import AnomalyLabel, classify
from fsa_anomaly_lab.fsa.generator import (
    DISTRIBUTIONS,
    EventDistribution,
    EventSampler,
    fixed_event,
    sample_event,
)
from fsa_anomaly_lab.fsa.health import HEALTH_PENALTY, MAX_HEALTH, MIN_HEALTH, next_health
from fsa_anomaly_lab.fsa.model import TRANSITIONS, Event, State, resolve

__all__ = [
    "DISTRIBUTIONS",
    "HEALTH_PENALTY",
    "MAX_HEALTH",
    "MIN_HEALTH",
    "TRANSITIONS",
    "AnomalyLabel",
    "Event",
    "EventDistribution",
    "EventSampler",
    "State",
    "classify",
    "fixed_event",
    "next_health",
    "resolve",
    "sample_event",
]
