"""Tests for the simulation state and the pure tick function."""

from dataclasses import replace
from datetime import datetime, timedelta
from random import Random

from hypothesis import given, settings
from hypothesis import strategies as st

from fsa_anomaly_lab.config import SimulationConfig
from fsa_anomaly_lab.core.node import Node
from fsa_anomaly_lab.core.state import SimulationState, initial_state, tick, validate_state
from fsa_anomaly_lab.core.types import NodeId, RunId
from fsa_anomaly_lab.fsa.classifier import AnomalyLabel
from fsa_anomaly_lab.fsa.generator import fixed_event
from fsa_anomaly_lab.fsa.model import Event, State


def run(state: SimulationState, rng: Random, ticks: int, start: datetime) -> SimulationState:
    for i in range(ticks):
        state = tick(state, rng, timestamp=start + timedelta(seconds=i))
    return state


class TestInitialState:
    def test_fresh_run(self, state: SimulationState) -> None:
        """Reset with three nodes: all OK, full health, empty buffers and counters."""
        assert len(state.nodes) == 3
        assert all(node.state is State.OK for node in state.nodes)
        assert all(node.health == 100 for node in state.nodes)
        assert state.log == ()
        assert state.trend == ()
        assert state.total_anomalies == 0
        assert state.total_events == 0
        assert state.tick_count == 0
        assert not state.running
        assert validate_state(state) == []

    def test_carries_config_policy(self) -> None:
        config = SimulationConfig(
            node_count=2, tick_interval_ms=250.0, log_capacity=5, trend_capacity=4
        )
        state = initial_state(config, RunId("r"))

        assert state.tick_interval_ms == 250.0
        assert state.log_capacity == 5
        assert state.trend_capacity == 4


class TestTick:
    def test_forced_suspicious_traffic(
        self, state: SimulationState, rng: Random, timestamp: datetime
    ) -> None:
        """Every node jumps to ERROR with a DDoS label; counters and buffers follow."""
        after = tick(state, rng, fixed_event(Event.SUSPICIOUS_TRAFFIC), timestamp)

        assert [node.state for node in after.nodes] == [State.ERROR] * 3
        assert all(node.anomalies == (AnomalyLabel.DDOS_SUSPICION,) for node in after.nodes)
        assert all(node.health == 98 for node in after.nodes)
        assert after.total_anomalies == 3
        assert after.total_events == 3
        assert len(after.trend) == 1
        assert after.trend[0].count == 3
        assert after.trend[0].timestamp == timestamp
        assert len(after.log) == 3
        assert all(entry.labels == (AnomalyLabel.DDOS_SUSPICION,) for entry in after.log)
        assert validate_state(after) == []

    def test_tick_does_not_mutate_input(self, state: SimulationState, rng: Random) -> None:
        tick(state, rng, fixed_event(Event.SUSPICIOUS_TRAFFIC))

        assert state.tick_count == 0
        assert all(node.state is State.OK for node in state.nodes)

    def test_log_is_newest_first(
        self, state: SimulationState, rng: Random, timestamp: datetime
    ) -> None:
        first = tick(state, rng, fixed_event(Event.LATENCY_HIGH), timestamp)
        second = tick(first, rng, fixed_event(Event.PING_OK), timestamp + timedelta(seconds=1))

        assert [entry.node_id for entry in second.log] == [
            "node-3",
            "node-2",
            "node-1",
            "node-3",
            "node-2",
            "node-1",
        ]
        assert second.log[0].event is Event.PING_OK
        assert second.log[0].previous_state is State.WARN
        assert second.log[0].new_state is State.OK
        assert second.log[-1].event is Event.LATENCY_HIGH

    def test_quiet_tick_still_records_trend_point(
        self, state: SimulationState, rng: Random
    ) -> None:
        after = tick(state, rng, fixed_event(Event.PING_OK))

        assert len(after.trend) == 1
        assert after.trend[0].count == 0
        assert after.total_anomalies == 0
        assert after.total_events == 3

    def test_nodes_step_from_pre_tick_snapshot(self, state: SimulationState, rng: Random) -> None:
        """No node observes another node's update within the same tick."""
        seen: list[State] = []

        def recording_sampler(node_state: State, _rng: Random) -> Event:
            seen.append(node_state)
            return Event.SUSPICIOUS_TRAFFIC

        tick(state, rng, recording_sampler)

        assert seen == [State.OK, State.OK, State.OK]

    def test_counters_over_many_ticks(
        self, state: SimulationState, rng: Random, timestamp: datetime
    ) -> None:
        after = run(state, rng, 10, timestamp)

        assert after.tick_count == 10
        assert after.total_events == 10 * 3
        assert after.total_anomalies == sum(point.count for point in after.trend)

    def test_buffers_capped_with_fifo_eviction(
        self, state: SimulationState, rng: Random, timestamp: datetime
    ) -> None:
        after = run(state, rng, 200, timestamp)

        assert len(after.log) == 100
        assert len(after.trend) == 30
        # Trend keeps the most recent 30 ticks, oldest first
        assert [point.timestamp for point in after.trend] == [
            timestamp + timedelta(seconds=i) for i in range(170, 200)
        ]
        # Log keeps the most recent entries, newest first
        assert after.log[0].timestamp == timestamp + timedelta(seconds=199)
        assert after.log[0].node_id == "node-3"
        assert validate_state(after) == []

    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    @settings(max_examples=25, deadline=None)
    def test_health_non_increasing(self, seed: int) -> None:
        rng = Random(seed)
        current = initial_state(SimulationConfig(node_count=4), RunId("prop"))

        for _ in range(60):
            after = tick(current, rng)
            for before_node, after_node in zip(current.nodes, after.nodes, strict=True):
                expected = max(0, before_node.health - 2 * (len(after_node.anomalies) > 0))
                assert after_node.health == expected
                assert 0 <= after_node.health <= before_node.health
            current = after

        assert validate_state(current) == []

    def test_seeded_runs_are_reproducible(self, state: SimulationState, timestamp: datetime) -> None:
        a = run(state, Random(7), 25, timestamp)
        b = run(state, Random(7), 25, timestamp)

        assert a == b


class TestValidateState:
    def test_detects_health_out_of_range(self, state: SimulationState) -> None:
        broken = replace(state, nodes=(replace(state.nodes[0], health=150), *state.nodes[1:]))

        errors = validate_state(broken)
        assert any("health" in e for e in errors)

    def test_detects_duplicate_ids(self, state: SimulationState) -> None:
        broken = replace(state, nodes=(Node(id=NodeId("node-1")), Node(id=NodeId("node-1"))))

        errors = validate_state(broken)
        assert any("duplicate" in e for e in errors)

    def test_detects_counter_drift(self, state: SimulationState) -> None:
        broken = replace(state, total_events=5)

        errors = validate_state(broken)
        assert any("total_events" in e for e in errors)
