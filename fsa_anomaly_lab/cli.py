from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from fsa_anomaly_lab.config import (
    DEFAULT_NODE_COUNT,
    SPEED_MULTIPLIERS,
    SimulationConfig,
    config_to_dict,
    speed_to_interval_ms,
    validate_config,
)
from fsa_anomaly_lab.core.simulation import Simulation

if TYPE_CHECKING:
    from fsa_anomaly_lab.metrics.results import SimulationSnapshot

logger = logging.getLogger(__name__)

PACED_POLL_SECONDS = 0.1


def print_tick(snapshot: SimulationSnapshot) -> None:
    # Newest first in the buffer; print this tick's entries in node order
    entries = snapshot.log[: snapshot.node_count]
    dropped = snapshot.node_count - len(entries)
    if dropped > 0:
        print(
            f"... {dropped} earlier entries of tick {snapshot.tick_count} "
            "exceed the log capacity"
        )
    for entry in reversed(entries):
        print(entry.format())


def print_summary(snapshot: SimulationSnapshot) -> None:
    print(f"\n=== Run {snapshot.run_id} ===")
    print(f"Ticks: {snapshot.tick_count}")
    print(f"Nodes: {snapshot.node_count}")
    print(f"Global anomalies: {snapshot.total_anomalies}")
    print(f"Total events: {snapshot.total_events}")

    print("\n=== Nodes ===")
    for node in snapshot.nodes:
        badges = ", ".join(label.display for label in node.anomalies) or "-"
        last_event = node.last_event.value if node.last_event is not None else "-"
        print(
            f"{node.id:<10} {node.state.value:<6} {last_event:<20} "
            f"health={node.health:<4} {badges}"
        )

    print("\n=== Anomaly trend (oldest first) ===")
    print(" ".join(str(point.count) for point in snapshot.trend))


def run_paced(simulation: Simulation, ticks: int) -> SimulationSnapshot:
    """Let the clock drive ``ticks`` ticks at the configured interval, then stop it."""
    if ticks <= 0:
        return simulation.snapshot()

    done = threading.Event()

    def _on_tick(snapshot: SimulationSnapshot) -> None:
        if snapshot.tick_count >= ticks:
            simulation.stop()
            done.set()

    unsubscribe = simulation.subscribe(_on_tick)
    simulation.start()
    try:
        # A failing tick halts the clock without reaching the target
        while not done.wait(PACED_POLL_SECONDS):
            if not simulation.running:
                break
    finally:
        unsubscribe()
        simulation.stop()
    return simulation.snapshot()


def run_headless(
    simulation: Simulation,
    ticks: int,
    realtime: bool = False,
    echo: bool = True,
) -> SimulationSnapshot:
    unsubscribe = simulation.subscribe(print_tick) if echo else None
    try:
        if realtime:
            return run_paced(simulation, ticks)
        return simulation.run_ticks(ticks)
    finally:
        if unsubscribe is not None:
            unsubscribe()


def main() -> None:
    import argparse
    from pathlib import Path

    parser = argparse.ArgumentParser(description="Finite-state anomaly simulator for node fleets")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to TOML configuration file",
    )
    parser.add_argument(
        "--nodes",
        type=int,
        help=f"Number of simulated nodes (default: {DEFAULT_NODE_COUNT}, minimum 1)",
    )
    parser.add_argument(
        "--speed",
        type=int,
        choices=SPEED_MULTIPLIERS,
        help="Speed multiplier: 1x=1000ms, 2x=500ms, 4x=250ms per tick",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for reproducible runs",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=20,
        help="Number of ticks to run headless (default: 20)",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace headless ticks at the configured interval",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the final snapshot as JSON instead of a summary",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP/WebSocket server instead of running headless",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the server (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config is not None:
        config = SimulationConfig.from_toml(args.config)
    else:
        config = SimulationConfig()

    overrides: dict[str, object] = {}
    if args.nodes is not None:
        overrides["node_count"] = args.nodes
    if args.speed is not None:
        overrides["tick_interval_ms"] = speed_to_interval_ms(args.speed)
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        config = replace(config, **overrides)

    is_valid, errors = validate_config(config)
    if not is_valid:
        parser.error("; ".join(errors))

    simulation = Simulation(config)
    logger.info("Config: %s", json.dumps(config_to_dict(config)))

    if args.serve:
        from fsa_anomaly_lab.server import run_server

        run_server(simulation, port=args.port)
        return

    snapshot = run_headless(simulation, args.ticks, realtime=args.realtime, echo=not args.json)
    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print_summary(snapshot)


if __name__ == "__main__":
    main()
