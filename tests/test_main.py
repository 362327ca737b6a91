"""Tests for pipeline wiring, including a full run against a fake GitHub API."""

import asyncio
import json
import logging
from functools import partial
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from autocoder.config import AutocoderSettings
from autocoder.events.emitter import CompositeEventEmitter, NullEventEmitter
from autocoder.errors import IssueNotFoundError
from autocoder.events.models import EventType, PipelineEvent
from autocoder.generation.fallback import FALLBACK_PATHS
from autocoder.github.client import GitHubClient
from autocoder.main import (
    _redact_secret,
    build_orchestrator,
    configure_logging,
    run_pipeline,
)
from autocoder.state.models import RunState


def run_async(coro):
    return asyncio.run(coro)


def _settings(**overrides) -> AutocoderSettings:
    values = {"github_token": "ghp_test", "repository": "acme/widgets"}
    values.update(overrides)
    return AutocoderSettings(**values)


class FakeGitHub:
    """Serves the handful of REST endpoints one run touches."""

    def __init__(self):
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        path = request.url.path

        if path == "/repos/acme/widgets/issues/2":
            return httpx.Response(
                200,
                json={
                    "number": 2,
                    "title": "Mystery shopper reports",
                    "body": "Record visits\n\nSummarize ratings",
                    "labels": [{"name": "priority:high"}],
                },
            )
        if path == "/repos/acme/widgets/git/ref/heads/main":
            return httpx.Response(200, json={"object": {"sha": "base-sha"}})
        if path == "/repos/acme/widgets/git/refs":
            return httpx.Response(201, json={"ref": body["ref"]})
        if path == "/repos/acme/widgets/git/commits/base-sha":
            return httpx.Response(200, json={"tree": {"sha": "base-tree"}})
        if path == "/repos/acme/widgets/git/trees":
            return httpx.Response(201, json={"sha": "tree-sha"})
        if path == "/repos/acme/widgets/git/commits":
            return httpx.Response(201, json={"sha": "commit-sha"})
        if path == "/repos/acme/widgets/pulls":
            return httpx.Response(
                201,
                json={
                    "number": 7,
                    "html_url": "https://github.com/acme/widgets/pull/7",
                    "head": {"ref": body["head"]},
                },
            )
        return httpx.Response(404, json={"message": "Not Found"})


def test_mock_mode_run_opens_pull_request_with_fallback_files():
    fake = FakeGitHub()

    async def scenario():
        async with GitHubClient(
            token="ghp_test", base_delay=0.0, transport=httpx.MockTransport(fake)
        ) as client:
            orchestrator = build_orchestrator(
                _settings(mock_mode=True), client, NullEventEmitter()
            )
            return await orchestrator.run(2)

    result = run_async(scenario())

    assert result.state == RunState.DONE
    assert result.pr_url == "https://github.com/acme/widgets/pull/7"
    assert result.task.priority == "priority:high"
    assert result.task.requirements == ["Record visits", "Summarize ratings"]

    tree_request = next(r for r in fake.requests if r[1].endswith("/git/trees"))
    assert tuple(e["path"] for e in tree_request[2]["tree"]) == FALLBACK_PATHS

    pr_request = fake.requests[-1]
    assert pr_request[2]["title"] == "Fix #2: Mystery shopper reports"
    assert pr_request[2]["head"] == "autocoder/issue-2"

    ref_request = next(r for r in fake.requests if r[1].endswith("/git/refs"))
    assert ref_request[2] == {
        "ref": "refs/heads/autocoder/issue-2",
        "sha": "commit-sha",
    }


def test_build_orchestrator_selects_fallback_without_key():
    client = GitHubClient(token="ghp_test")

    orchestrator = build_orchestrator(_settings(), client)

    assert orchestrator.generator.uses_fallback
    assert orchestrator.analyzer.repository == "acme/widgets"
    assert orchestrator.submitter.base_branch == "main"


def test_build_orchestrator_selects_live_backend_with_key():
    client = GitHubClient(token="ghp_test")

    orchestrator = build_orchestrator(
        _settings(anthropic_api_key="sk-ant-test", llm_model="claude-x"), client
    )

    assert not orchestrator.generator.uses_fallback
    assert orchestrator.generator.model == "claude-x"


def test_redact_secret():
    assert _redact_secret("ghp_abcdef") == "ghp_******"
    assert _redact_secret("abc") == "***"
    assert _redact_secret("") == ""


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG

        configure_logging("error")
        assert root.level == logging.ERROR
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)


def test_build_orchestrator_fans_events_out_to_extra_emitter():
    extra = AsyncMock()

    orchestrator = build_orchestrator(_settings(), GitHubClient(token="t"), extra)
    event = PipelineEvent(
        event_type=EventType.STATE_TRANSITION,
        issue_id="acme/widgets#2",
        repository="acme/widgets",
    )

    run_async(orchestrator.event_emitter.emit(event))

    assert isinstance(orchestrator.event_emitter, CompositeEventEmitter)
    extra.emit.assert_awaited_once_with(event)


def test_run_pipeline_delivers_events_and_closes_emitters():
    fake = FakeGitHub()
    extra = AsyncMock()
    client_factory = partial(
        GitHubClient, base_delay=0.0, transport=httpx.MockTransport(fake)
    )

    with patch("autocoder.main.GitHubClient", client_factory):
        result = run_async(run_pipeline(_settings(mock_mode=True), 2, extra))

    assert result.pr_url == "https://github.com/acme/widgets/pull/7"
    event_types = [c.args[0].event_type for c in extra.emit.await_args_list]
    assert event_types[-1] == EventType.COMPLETION
    extra.close.assert_awaited_once()


def test_run_pipeline_closes_emitters_when_a_stage_fails():
    extra = AsyncMock()
    client_factory = partial(
        GitHubClient,
        transport=httpx.MockTransport(lambda request: httpx.Response(404)),
    )

    with patch("autocoder.main.GitHubClient", client_factory):
        with pytest.raises(IssueNotFoundError):
            run_async(run_pipeline(_settings(mock_mode=True), 2, extra))

    event_types = [c.args[0].event_type for c in extra.emit.await_args_list]
    assert EventType.ERROR in event_types
    extra.close.assert_awaited_once()

