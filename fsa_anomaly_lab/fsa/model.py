"""Node health automaton: states, telemetry events and the transition table."""

from __future__ import annotations

from enum import Enum

import networkx as nx


class State(Enum):
    OK = "OK"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def severity(self) -> int:
        """Display ordering only; the automaton treats states as unordered."""
        return _SEVERITY[self]


_SEVERITY = {State.OK: 0, State.WARN: 1, State.ERROR: 2}


class Event(Enum):
    PING_OK = "ping_ok"
    LATENCY_HIGH = "latency_high"
    PACKET_LOSS_HIGH = "packet_loss_high"
    PING_TIMEOUT = "ping_timeout"
    SUSPICIOUS_TRAFFIC = "suspicious_traffic"


# Hand-authored policy. (OK, PING_TIMEOUT) is deliberately absent: it is the
# only forbidden cell and resolves to "no movement".
TRANSITIONS: dict[State, dict[Event, State]] = {
    State.OK: {
        Event.PING_OK: State.OK,
        Event.LATENCY_HIGH: State.WARN,
        Event.PACKET_LOSS_HIGH: State.WARN,
        Event.SUSPICIOUS_TRAFFIC: State.ERROR,
    },
    State.WARN: {
        Event.PING_OK: State.OK,
        Event.LATENCY_HIGH: State.WARN,
        Event.PACKET_LOSS_HIGH: State.WARN,
        Event.PING_TIMEOUT: State.ERROR,
        Event.SUSPICIOUS_TRAFFIC: State.ERROR,
    },
    State.ERROR: {
        Event.PING_OK: State.WARN,
        Event.LATENCY_HIGH: State.ERROR,
        Event.PACKET_LOSS_HIGH: State.ERROR,
        Event.PING_TIMEOUT: State.ERROR,
        Event.SUSPICIOUS_TRAFFIC: State.ERROR,
    },
}


def resolve(state: State, event: Event) -> tuple[State, bool]:
    """Look up the next state for an event.

    Returns ``(next_state, was_defined)``. An undefined pair is not rejected:
    the node stays where it is and ``was_defined`` is False, which the
    classifier reports as a forbidden transition.
    """
    next_state = TRANSITIONS[state].get(event)
    if next_state is None:
        return state, False
    return next_state, True


def forbidden_pairs() -> list[tuple[State, Event]]:
    return [
        (state, event)
        for state in State
        for event in Event
        if event not in TRANSITIONS[state]
    ]


def transition_graph() -> nx.MultiDiGraph:
    """Build a multigraph with one edge per defined cell, keyed by event value."""
    graph = nx.MultiDiGraph()
    graph.add_nodes_from(state.value for state in State)
    for state, row in TRANSITIONS.items():
        for event, next_state in row.items():
            graph.add_edge(state.value, next_state.value, key=event.value, event=event.value)
    return graph


def reachable_states(start: State) -> set[State]:
    """States reachable from ``start`` through defined transitions, itself included."""
    descendants = nx.descendants(transition_graph(), start.value)
    return {start} | {State(value) for value in descendants}


def table_to_dict() -> dict[str, dict[str, str | None]]:
    return {
        state.value: {
            event.value: (TRANSITIONS[state][event].value if event in TRANSITIONS[state] else None)
            for event in Event
        }
        for state in State
    }
