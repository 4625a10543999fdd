"""Rolling aggregation of per-tick results."""

from .aggregator import aggregate_tick, push_newest_first, push_oldest_first
from .results import LogEntry, SimulationSnapshot, TrendPoint

__all__ = [
    "LogEntry",
    "SimulationSnapshot",
    "TrendPoint",
    "aggregate_tick",
    "push_newest_first",
    "push_oldest_first",
]
