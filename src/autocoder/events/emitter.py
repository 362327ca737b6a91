"""Event emitter implementations for pipeline observability.

- LoggingEventEmitter: Emits events as structured log entries
- CompositeEventEmitter: Emits to multiple sinks simultaneously
- NullEventEmitter: Discards events
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from autocoder.events.models import EventType, PipelineEvent


logger = logging.getLogger(__name__)


class EventEmitter(ABC):
    """Abstract base class for pipeline event emitters.

    Implementations should not let emission failures reach the pipeline.
    """

    @abstractmethod
    async def emit(self, event: PipelineEvent) -> None:
        """Emit a pipeline event."""

    async def close(self) -> None:
        """Close the emitter and release resources."""


class LoggingEventEmitter(EventEmitter):
    """Event emitter that writes events as log entries.

    Errors are logged at ERROR level, everything else at INFO. All event
    fields are attached as extra context.
    """

    def __init__(self, logger_name: Optional[str] = None):
        self._logger = logging.getLogger(logger_name) if logger_name else logger
        self._log_level_map = {
            EventType.STATE_TRANSITION: logging.INFO,
            EventType.COMPLETION: logging.INFO,
            EventType.ERROR: logging.ERROR,
        }

    async def emit(self, event: PipelineEvent) -> None:
        log_level = self._log_level_map.get(event.event_type, logging.INFO)
        self._logger.log(
            log_level,
            "Pipeline event: %s for %s",
            event.event_type.value,
            event.issue_id,
            extra=event.to_log_dict(),
        )


class CompositeEventEmitter(EventEmitter):
    """Event emitter that delegates to multiple child emitters.

    Failures in one child are logged and do not affect the others.
    """

    def __init__(self, emitters: Optional[List[EventEmitter]] = None):
        self._emitters: List[EventEmitter] = emitters or []

    def add_emitter(self, emitter: EventEmitter) -> None:
        self._emitters.append(emitter)

    async def emit(self, event: PipelineEvent) -> None:
        for emitter in self._emitters:
            try:
                await emitter.emit(event)
            except Exception as e:
                logger.error(
                    "Failed to emit event to %s: %s",
                    type(emitter).__name__,
                    str(e),
                    extra={
                        "emitter_type": type(emitter).__name__,
                        "event_type": event.event_type.value,
                        "issue_id": event.issue_id,
                    },
                )

    async def close(self) -> None:
        for emitter in self._emitters:
            try:
                await emitter.close()
            except Exception as e:
                logger.error(
                    "Failed to close emitter %s: %s",
                    type(emitter).__name__,
                    str(e),
                )


class NullEventEmitter(EventEmitter):
    """Event emitter that discards all events."""

    async def emit(self, event: PipelineEvent) -> None:
        pass
