"""Finite-state anomaly simulator for a fleet of network nodes."""

from fsa_anomaly_lab.config import SimulationConfig
from fsa_anomaly_lab.core.simulation import Simulation
from fsa_anomaly_lab.fsa.classifier import AnomalyLabel
from fsa_anomaly_lab.fsa.model import Event, State

__all__ = [
    "AnomalyLabel",
    "Event",
    "Simulation",
    "SimulationConfig",
    "State",
]
