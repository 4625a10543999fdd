"""Shared pytest fixtures for fsa anomaly lab tests."""

from collections.abc import Iterator
from datetime import UTC, datetime
from random import Random

import pytest

from fsa_anomaly_lab.config import SimulationConfig
from fsa_anomaly_lab.core.simulation import Simulation
from fsa_anomaly_lab.core.state import SimulationState, initial_state
from fsa_anomaly_lab.core.types import RunId


@pytest.fixture
def rng() -> Random:
    """Seeded RNG for reproducible sampling."""
    return Random(42)


@pytest.fixture
def timestamp() -> datetime:
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def config() -> SimulationConfig:
    """Small seeded fleet."""
    return SimulationConfig(node_count=3, seed=42)


@pytest.fixture
def state(config: SimulationConfig) -> SimulationState:
    """Fresh run with three nodes."""
    return initial_state(config, RunId("test-run"))


@pytest.fixture
def simulation(config: SimulationConfig) -> Iterator[Simulation]:
    sim = Simulation(config)
    yield sim
    sim.stop()
