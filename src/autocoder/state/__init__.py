"""Run state machine.

A run progresses idle → analyzing → generating → [submitting] → done,
and moves to failed when a stage raises.
"""

from autocoder.state.machine import InvalidTransitionError, RunStateMachine
from autocoder.state.models import (
    VALID_TRANSITIONS,
    RunState,
    StateTransition,
    is_terminal_state,
    is_valid_transition,
)

__all__ = [
    "InvalidTransitionError",
    "RunState",
    "RunStateMachine",
    "StateTransition",
    "VALID_TRANSITIONS",
    "is_terminal_state",
    "is_valid_transition",
]
