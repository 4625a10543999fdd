"""Simulation configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fsa_anomaly_lab.fsa.health import HEALTH_PENALTY

if TYPE_CHECKING:
    from pathlib import Path

BASE_TICK_INTERVAL_MS = 1000.0
SPEED_MULTIPLIERS: tuple[int, ...] = (1, 2, 4)

DEFAULT_NODE_COUNT = 10
LOG_CAPACITY = 100
TREND_CAPACITY = 30


def clamp_node_count(value: object) -> int:
    """Coerce user input to a node count of at least 1. Never raises."""
    try:
        count = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return 1
    return max(1, count)


def speed_to_interval_ms(multiplier: float) -> float:
    """1x -> 1000ms, 2x -> 500ms, 4x -> 250ms."""
    if multiplier <= 0:
        raise ValueError(f"Speed multiplier must be positive, got {multiplier}")
    return BASE_TICK_INTERVAL_MS / multiplier


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for a node fleet simulation."""

    # Fleet
    node_count: int = DEFAULT_NODE_COUNT

    # Cadence
    tick_interval_ms: float = BASE_TICK_INTERVAL_MS

    # Rolling windows
    log_capacity: int = LOG_CAPACITY  # newest-first event log
    trend_capacity: int = TREND_CAPACITY  # oldest-first anomaly trend

    # Health policy
    health_penalty: int = HEALTH_PENALTY

    # None seeds from system entropy
    seed: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_count", clamp_node_count(self.node_count))

    @classmethod
    def from_toml(cls, path: Path) -> SimulationConfig:
        import tomllib

        with path.open("rb") as f:
            data = tomllib.load(f)

        simulation = data.get("simulation", {})
        buffers = data.get("buffers", {})

        if "speed" in simulation:
            interval = speed_to_interval_ms(simulation["speed"])
        else:
            interval = simulation.get("tick_interval_ms", BASE_TICK_INTERVAL_MS)

        return cls(
            node_count=simulation.get("node_count", DEFAULT_NODE_COUNT),
            tick_interval_ms=interval,
            log_capacity=buffers.get("log_capacity", LOG_CAPACITY),
            trend_capacity=buffers.get("trend_capacity", TREND_CAPACITY),
            health_penalty=simulation.get("health_penalty", HEALTH_PENALTY),
            seed=simulation.get("seed"),
        )


def validate_config(config: SimulationConfig) -> tuple[bool, list[str]]:
    errors: list[str] = []

    if config.tick_interval_ms <= 0:
        errors.append(f"tick_interval_ms ({config.tick_interval_ms}) <= 0")

    if config.log_capacity <= 0:
        errors.append(f"log_capacity ({config.log_capacity}) <= 0")

    if config.trend_capacity <= 0:
        errors.append(f"trend_capacity ({config.trend_capacity}) <= 0")

    if config.health_penalty <= 0:
        errors.append(f"health_penalty ({config.health_penalty}) <= 0")

    return (len(errors) == 0, errors)


def config_to_dict(config: SimulationConfig) -> dict[str, object]:
    return {
        "node_count": config.node_count,
        "tick_interval_ms": config.tick_interval_ms,
        "log_capacity": config.log_capacity,
        "trend_capacity": config.trend_capacity,
        "health_penalty": config.health_penalty,
        "seed": config.seed,
    }
