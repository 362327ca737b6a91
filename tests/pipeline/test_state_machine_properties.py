"""Property-based and unit tests for the run state machine.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

import pytest
from hypothesis import given, settings, strategies as st

from autocoder.state.machine import InvalidTransitionError, RunStateMachine
from autocoder.state.models import (
    VALID_TRANSITIONS,
    RunState,
    is_terminal_state,
    is_valid_transition,
)


run_states = st.sampled_from(list(RunState))


def _machine_in(state: RunState) -> RunStateMachine:
    """Walk a fresh machine along the shortest valid path to state."""
    paths = {
        RunState.IDLE: [],
        RunState.ANALYZING: [RunState.ANALYZING],
        RunState.GENERATING: [RunState.ANALYZING, RunState.GENERATING],
        RunState.SUBMITTING: [
            RunState.ANALYZING,
            RunState.GENERATING,
            RunState.SUBMITTING,
        ],
        RunState.DONE: [RunState.ANALYZING, RunState.GENERATING, RunState.DONE],
        RunState.FAILED: [RunState.FAILED],
    }
    machine = RunStateMachine("acme/widgets#1")
    for step in paths[state]:
        machine.transition(step, {"error": "boom"} if step == RunState.FAILED else None)
    return machine


# =============================================================================
# Properties
# =============================================================================


@settings(max_examples=100)
@given(from_state=run_states, to_state=run_states)
def test_transition_succeeds_iff_listed(from_state, to_state):
    machine = _machine_in(from_state)
    history_before = len(machine.history)

    if is_valid_transition(from_state, to_state):
        machine.transition(to_state, {"error": "x"})
        assert machine.current_state == to_state
        assert len(machine.history) == history_before + 1
    else:
        with pytest.raises(InvalidTransitionError):
            machine.transition(to_state)
        assert machine.current_state == from_state
        assert len(machine.history) == history_before


@settings(max_examples=100)
@given(steps=st.lists(run_states, max_size=12))
def test_history_forms_a_connected_chain(steps):
    machine = RunStateMachine("acme/widgets#1")

    for step in steps:
        if is_valid_transition(machine.current_state, step):
            machine.transition(step, {"error": "x"})

    previous = RunState.IDLE
    for transition in machine.history:
        assert transition.from_state == previous
        assert is_valid_transition(transition.from_state, transition.to_state)
        previous = transition.to_state
    assert previous == machine.current_state


@settings(max_examples=100)
@given(state=run_states)
def test_every_non_terminal_state_can_fail(state):
    if is_terminal_state(state):
        assert VALID_TRANSITIONS[state] == []
    else:
        assert is_valid_transition(state, RunState.FAILED)


# =============================================================================
# Unit tests
# =============================================================================


def test_new_machine_is_idle():
    machine = RunStateMachine("acme/widgets#1")

    assert machine.current_state == RunState.IDLE
    assert machine.history == []
    assert machine.error is None
    assert not is_terminal_state(machine.current_state)


def test_generating_may_finish_without_submitting():
    machine = _machine_in(RunState.GENERATING)

    machine.transition(RunState.DONE)

    assert machine.current_state == RunState.DONE
    assert [t.to_state for t in machine.history] == [
        RunState.ANALYZING,
        RunState.GENERATING,
        RunState.DONE,
    ]


def test_cannot_skip_analysis():
    machine = RunStateMachine("acme/widgets#1")

    with pytest.raises(InvalidTransitionError) as exc_info:
        machine.transition(RunState.GENERATING)

    assert exc_info.value.from_state == RunState.IDLE
    assert exc_info.value.to_state == RunState.GENERATING
    assert "idle" in str(exc_info.value)


def test_failed_records_error():
    machine = _machine_in(RunState.ANALYZING)

    machine.transition(RunState.FAILED, {"error": "analyzing: not found"})

    assert machine.error == "analyzing: not found"
    assert machine.history[-1].details == {"error": "analyzing: not found"}


def test_failed_without_error_gets_default_message():
    machine = _machine_in(RunState.ANALYZING)

    machine.transition(RunState.FAILED)

    assert machine.error == "Unknown error (no details provided)"


@pytest.mark.parametrize("terminal", [RunState.DONE, RunState.FAILED])
def test_terminal_states_reject_everything(terminal):
    machine = _machine_in(terminal)

    for state in RunState:
        with pytest.raises(InvalidTransitionError):
            machine.transition(state)
