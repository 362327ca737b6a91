"""Unit tests for pipeline events and emitters."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from autocoder.events.emitter import (
    CompositeEventEmitter,
    LoggingEventEmitter,
    NullEventEmitter,
)
from autocoder.events.models import EventType, PipelineEvent


def run_async(coro):
    return asyncio.run(coro)


def _make_event(event_type: EventType = EventType.COMPLETION, **details):
    return PipelineEvent(
        event_type=event_type,
        issue_id="acme/widgets#2",
        repository="acme/widgets",
        details=details,
    )


class TestPipelineEvent:
    def test_log_dict_is_flat(self):
        event = _make_event(files=2, pr_url="https://x/pull/7")

        data = event.to_log_dict()

        assert data["event_type"] == "completion"
        assert data["issue_id"] == "acme/widgets#2"
        assert data["files"] == 2
        assert data["pr_url"] == "https://x/pull/7"
        assert data["timestamp"] == event.timestamp.isoformat()

    def test_empty_issue_id_rejected(self):
        with pytest.raises(Exception):
            PipelineEvent(
                event_type=EventType.ERROR, issue_id="", repository="acme/widgets"
            )


class TestLoggingEventEmitter:
    def test_error_events_log_at_error(self, caplog):
        emitter = LoggingEventEmitter(logger_name="test.events")

        with caplog.at_level(logging.INFO, logger="test.events"):
            run_async(emitter.emit(_make_event(EventType.ERROR, stage="analyzing")))

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.stage == "analyzing"
        assert "acme/widgets#2" in record.getMessage()

    def test_transition_events_log_at_info(self, caplog):
        emitter = LoggingEventEmitter(logger_name="test.events")

        with caplog.at_level(logging.INFO, logger="test.events"):
            run_async(emitter.emit(_make_event(EventType.STATE_TRANSITION)))

        assert caplog.records[-1].levelno == logging.INFO


class TestCompositeEventEmitter:
    def test_delivers_to_every_child(self):
        first, second = AsyncMock(), AsyncMock()
        emitter = CompositeEventEmitter([first])
        emitter.add_emitter(second)
        event = _make_event()

        run_async(emitter.emit(event))

        first.emit.assert_awaited_once_with(event)
        second.emit.assert_awaited_once_with(event)

    def test_child_failure_does_not_stop_others(self):
        failing, healthy = AsyncMock(), AsyncMock()
        failing.emit.side_effect = RuntimeError("sink down")
        emitter = CompositeEventEmitter([failing, healthy])

        run_async(emitter.emit(_make_event()))

        healthy.emit.assert_awaited_once()

    def test_close_closes_children(self):
        failing, healthy = AsyncMock(), AsyncMock()
        failing.close.side_effect = RuntimeError("already closed")

        run_async(CompositeEventEmitter([failing, healthy]).close())

        healthy.close.assert_awaited_once()


def test_null_emitter_discards():
    run_async(NullEventEmitter().emit(_make_event()))
