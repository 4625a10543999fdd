"""Stochastic telemetry event generator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fsa_anomaly_lab.fsa.model import Event, State

if TYPE_CHECKING:
    from random import Random

type EventSampler = Callable[[State, Random], Event]


@dataclass(frozen=True)
class EventDistribution:
    """Discrete distribution over a subset of events, in declaration order.

    Weights are policy data and are not normalized: they may sum to more or
    less than 1. Residual mass falls back to the first declared event.
    """

    weights: tuple[tuple[Event, float], ...]

    def __post_init__(self) -> None:
        if not self.weights:
            raise ValueError("EventDistribution needs at least one event")

    @property
    def fallback(self) -> Event:
        return self.weights[0][0]

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(event for event, _ in self.weights)

    def pick(self, r: float) -> Event:
        cumulative = 0.0
        for event, probability in self.weights:
            cumulative += probability
            if r <= cumulative:
                return event
        return self.fallback

    def to_dict(self) -> dict[str, float]:
        return {event.value: probability for event, probability in self.weights}


DISTRIBUTIONS: dict[State, EventDistribution] = {
    State.OK: EventDistribution(
        (
            (Event.PING_OK, 0.83),
            (Event.LATENCY_HIGH, 0.1),
            (Event.PACKET_LOSS_HIGH, 0.05),
            (Event.SUSPICIOUS_TRAFFIC, 0.05),
        )
    ),
    State.WARN: EventDistribution(
        (
            (Event.PING_OK, 0.7),
            (Event.LATENCY_HIGH, 0.2),
            (Event.PACKET_LOSS_HIGH, 0.2),
            (Event.PING_TIMEOUT, 0.1),
            (Event.SUSPICIOUS_TRAFFIC, 0.0),
        )
    ),
    # Sums to 0.8; the remaining mass lands on PING_TIMEOUT via the fallback.
    State.ERROR: EventDistribution(
        (
            (Event.PING_TIMEOUT, 0.4),
            (Event.PACKET_LOSS_HIGH, 0.2),
            (Event.SUSPICIOUS_TRAFFIC, 0.1),
            (Event.LATENCY_HIGH, 0.1),
        )
    ),
}


def sample_event(state: State, rng: Random) -> Event:
    """Draw one telemetry event for a node currently in ``state``."""
    return DISTRIBUTIONS[state].pick(rng.random())


def fixed_event(event: Event) -> EventSampler:
    """Sampler that always returns ``event``, for scripted scenarios."""

    def _sampler(state: State, rng: Random) -> Event:
        return event

    return _sampler
