"""Core simulation infrastructure."""

from fsa_anomaly_lab.core.clock import ClockState, SimulationClock
from fsa_anomaly_lab.core.node import Node, NodeOutcome, advance_node, build_registry
from fsa_anomaly_lab.core.simulation import Simulation, generate_run_id
from fsa_anomaly_lab.core.state import SimulationState, initial_state, tick, validate_state
from fsa_anomaly_lab.core.types import NodeId, RunId

__all__ = [
    "ClockState",
    "Node",
    "NodeId",
    "NodeOutcome",
    "RunId",
    "Simulation",
    "SimulationClock",
    "SimulationState",
    "advance_node",
    "build_registry",
    "generate_run_id",
    "initial_state",
    "tick",
    "validate_state",
]
