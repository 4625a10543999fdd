"""Tests for the node health automaton."""

import pytest

from fsa_anomaly_lab.fsa.model import (
    TRANSITIONS,
    Event,
    State,
    forbidden_pairs,
    reachable_states,
    resolve,
    table_to_dict,
    transition_graph,
)


class TestResolve:
    @pytest.mark.parametrize("state", list(State))
    @pytest.mark.parametrize("event", list(Event))
    def test_resolve_is_total(self, state: State, event: Event) -> None:
        """Every (state, event) pair resolves to a state; only (OK, ping_timeout) is undefined."""
        next_state, was_defined = resolve(state, event)

        assert isinstance(next_state, State)
        assert was_defined == ((state, event) != (State.OK, Event.PING_TIMEOUT))

    def test_undefined_pair_means_no_movement(self) -> None:
        """OK --ping_timeout--> is a known gap in the policy and is kept as such."""
        assert resolve(State.OK, Event.PING_TIMEOUT) == (State.OK, False)

    @pytest.mark.parametrize(
        ("state", "event", "expected"),
        [
            (State.OK, Event.PING_OK, State.OK),
            (State.OK, Event.LATENCY_HIGH, State.WARN),
            (State.OK, Event.PACKET_LOSS_HIGH, State.WARN),
            (State.OK, Event.SUSPICIOUS_TRAFFIC, State.ERROR),
            (State.WARN, Event.PING_OK, State.OK),
            (State.WARN, Event.LATENCY_HIGH, State.WARN),
            (State.WARN, Event.PACKET_LOSS_HIGH, State.WARN),
            (State.WARN, Event.PING_TIMEOUT, State.ERROR),
            (State.WARN, Event.SUSPICIOUS_TRAFFIC, State.ERROR),
            (State.ERROR, Event.PING_OK, State.WARN),
            (State.ERROR, Event.LATENCY_HIGH, State.ERROR),
            (State.ERROR, Event.PACKET_LOSS_HIGH, State.ERROR),
            (State.ERROR, Event.PING_TIMEOUT, State.ERROR),
            (State.ERROR, Event.SUSPICIOUS_TRAFFIC, State.ERROR),
        ],
    )
    def test_defined_cells(self, state: State, event: Event, expected: State) -> None:
        assert resolve(state, event) == (expected, True)


class TestTransitionTable:
    def test_forbidden_pairs(self) -> None:
        assert forbidden_pairs() == [(State.OK, Event.PING_TIMEOUT)]

    def test_table_to_dict_marks_gap_as_none(self) -> None:
        table = table_to_dict()

        assert set(table) == {"OK", "WARN", "ERROR"}
        assert table["OK"]["ping_timeout"] is None
        assert table["ERROR"]["ping_ok"] == "WARN"

    def test_severity_orders_states_for_display(self) -> None:
        assert State.OK.severity < State.WARN.severity < State.ERROR.severity


class TestTransitionGraph:
    def test_one_edge_per_defined_cell(self) -> None:
        graph = transition_graph()
        defined = sum(len(row) for row in TRANSITIONS.values())

        assert defined == 14
        assert graph.number_of_edges() == defined
        assert set(graph.nodes) == {"OK", "WARN", "ERROR"}

    def test_edges_keyed_by_event(self) -> None:
        graph = transition_graph()

        assert graph.has_edge("OK", "ERROR", key="suspicious_traffic")
        assert graph.has_edge("WARN", "ERROR", key="ping_timeout")
        assert not graph.has_edge("OK", "OK", key="ping_timeout")

    @pytest.mark.parametrize("start", list(State))
    def test_every_state_reachable(self, start: State) -> None:
        assert reachable_states(start) == set(State)
