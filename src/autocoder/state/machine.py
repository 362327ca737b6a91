"""Run state machine.

Tracks one pipeline run in memory. Each run owns its own machine; nothing
is persisted or shared between runs.

The machine enforces:
- Only transitions listed in VALID_TRANSITIONS are allowed
- Every transition is recorded with a timestamp in history
- Transitions to FAILED always carry an error message
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from autocoder.state.models import (
    RunState,
    StateTransition,
    is_valid_transition,
)


logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted.

    Attributes:
        from_state: The current state.
        to_state: The attempted target state.
        message: Human-readable error message.
    """

    def __init__(
        self,
        from_state: RunState,
        to_state: RunState,
        message: Optional[str] = None,
    ):
        self.from_state = from_state
        self.to_state = to_state
        self.message = message or (
            f"Invalid transition from {from_state.value} to {to_state.value}"
        )
        super().__init__(self.message)


class RunStateMachine:
    """State machine for a single pipeline run.

    Attributes:
        run_id: Identifier used in log context, e.g. "owner/repo#123".
        current_state: The state the run is in.
        history: Ordered list of all transitions.
        error: Error message recorded on transition to FAILED.

    Example:
        >>> machine = RunStateMachine("owner/repo#123")
        >>> machine.transition(RunState.ANALYZING).to_state
        <RunState.ANALYZING: 'analyzing'>
    """

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.current_state = RunState.IDLE
        self.history: List[StateTransition] = []
        self.error: Optional[str] = None

    def transition(
        self,
        to_state: RunState,
        details: Optional[Dict[str, Any]] = None,
    ) -> StateTransition:
        """Move the run to a new state.

        Args:
            to_state: The target state.
            details: Optional metadata. For FAILED transitions, should
                     include an "error" key with the error message.

        Returns:
            The recorded transition.

        Raises:
            InvalidTransitionError: If the transition is not valid.
        """
        details = details or {}
        from_state = self.current_state

        if not is_valid_transition(from_state, to_state):
            logger.warning(
                "Invalid state transition attempted",
                extra={
                    "run_id": self.run_id,
                    "from_state": from_state.value,
                    "to_state": to_state.value,
                },
            )
            raise InvalidTransitionError(from_state, to_state)

        if to_state == RunState.FAILED:
            self.error = details.get("error")
            if not self.error:
                self.error = "Unknown error (no details provided)"
                logger.warning(
                    "Transition to FAILED without error details",
                    extra={"run_id": self.run_id},
                )

        transition = StateTransition(
            from_state=from_state,
            to_state=to_state,
            timestamp=datetime.now(timezone.utc),
            details=details,
        )
        self.history.append(transition)
        self.current_state = to_state

        logger.debug(
            "Run state transition",
            extra={
                "run_id": self.run_id,
                "from_state": from_state.value,
                "to_state": to_state.value,
            },
        )

        return transition
