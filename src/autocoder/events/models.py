"""Pipeline event models for observability.

This module defines the data models for pipeline events, including:
- EventType: Enum of all event types emitted by the pipeline
- PipelineEvent: Structured event with all required metadata
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of events emitted by the pipeline.

    Attributes:
        STATE_TRANSITION: A run moved from one state to another.
        ERROR: A stage raised and the run failed.
        COMPLETION: A run reached DONE.
    """

    STATE_TRANSITION = "state_transition"
    ERROR = "error"
    COMPLETION = "completion"


class PipelineEvent(BaseModel):
    """Structured event emitted by the pipeline.

    Attributes:
        event_type: The category of event.
        issue_id: Canonical identifier in format "{owner}/{repo}#{number}".
        repository: Full repository path in format "{owner}/{repo}".
        timestamp: When the event occurred (UTC timezone).
        details: Additional context specific to the event type.

    Details Field Conventions:
        For STATE_TRANSITION events:
            - from_state, to_state

        For ERROR events:
            - stage: State the run was in when the error occurred
            - error_type: Exception class name
            - error_message: Human-readable error description

        For COMPLETION events:
            - files: Number of generated files
            - pr_url: URL to the pull request, None when nothing was submitted
    """

    event_type: EventType = Field(
        ...,
        description="The category of event being emitted",
    )

    issue_id: str = Field(
        ...,
        min_length=1,
        description='Canonical issue identifier in format "{owner}/{repo}#{number}"',
    )

    repository: str = Field(
        ...,
        min_length=1,
        description='Full repository path in format "{owner}/{repo}"',
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC timezone)",
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context specific to the event type",
    )

    def to_log_dict(self) -> Dict[str, Any]:
        """Convert event to a flat dictionary for structured logging."""
        return {
            "event_type": self.event_type.value,
            "issue_id": self.issue_id,
            "repository": self.repository,
            "timestamp": self.timestamp.isoformat(),
            **self.details,
        }
