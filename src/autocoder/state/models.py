"""Run state models.

This module defines the data models for a pipeline run:
- RunState: Enum of all run states
- StateTransition: Record of a state transition with timestamp and details
- VALID_TRANSITIONS: Map defining allowed state transitions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class RunState(str, Enum):
    """States a pipeline run moves through.

    Flow:
        idle → analyzing → generating → submitting → done
                                     ↘ done (empty file set)

    Any non-terminal state can transition to 'failed'. DONE and FAILED are
    terminal.

    Attributes:
        IDLE: Run created, not started.
        ANALYZING: Fetching and normalizing the issue.
        GENERATING: Producing the file set.
        SUBMITTING: Opening the pull request.
        DONE: Run finished successfully (with or without a pull request).
        FAILED: A stage raised; the run was aborted.
    """

    IDLE = "idle"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


class StateTransition(BaseModel):
    """Record of a state transition in a run.

    Attributes:
        from_state: The state before the transition.
        to_state: The state after the transition.
        timestamp: When the transition occurred (UTC).
        details: Optional metadata (error info, file counts, PR URL).
    """

    from_state: RunState = Field(
        ...,
        description="The run state before this transition",
    )

    to_state: RunState = Field(
        ...,
        description="The run state after this transition",
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the transition occurred (UTC timezone)",
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Optional metadata about the transition",
    )


# GENERATING may skip SUBMITTING when the file set is empty; that is a
# successful no-op, not a failure.
VALID_TRANSITIONS: Dict[RunState, List[RunState]] = {
    RunState.IDLE: [
        RunState.ANALYZING,
        RunState.FAILED,
    ],
    RunState.ANALYZING: [
        RunState.GENERATING,
        RunState.FAILED,
    ],
    RunState.GENERATING: [
        RunState.SUBMITTING,
        RunState.DONE,
        RunState.FAILED,
    ],
    RunState.SUBMITTING: [
        RunState.DONE,
        RunState.FAILED,
    ],
    RunState.DONE: [],
    RunState.FAILED: [],
}


def is_valid_transition(from_state: RunState, to_state: RunState) -> bool:
    """Check if a state transition is valid.

    Example:
        >>> is_valid_transition(RunState.IDLE, RunState.ANALYZING)
        True
        >>> is_valid_transition(RunState.DONE, RunState.IDLE)
        False
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def is_terminal_state(state: RunState) -> bool:
    """Check if a state has no outgoing transitions."""
    return len(VALID_TRANSITIONS.get(state, [])) == 0
