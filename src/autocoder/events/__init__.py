"""Pipeline events for observability."""

from autocoder.events.emitter import (
    CompositeEventEmitter,
    EventEmitter,
    LoggingEventEmitter,
    NullEventEmitter,
)
from autocoder.events.models import EventType, PipelineEvent

__all__ = [
    "CompositeEventEmitter",
    "EventEmitter",
    "EventType",
    "LoggingEventEmitter",
    "NullEventEmitter",
    "PipelineEvent",
]
