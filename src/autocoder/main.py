"""Pipeline wiring and process-level setup.

Builds the stage instances from AutocoderSettings, configures logging, and
runs one issue through the orchestrator. Each call to run_pipeline builds
its own GitHub client and stages; nothing is shared between runs.
"""

import logging
from typing import Optional

from autocoder.analysis.analyzer import IssueAnalyzer
from autocoder.config import AutocoderSettings
from autocoder.events.emitter import (
    CompositeEventEmitter,
    EventEmitter,
    LoggingEventEmitter,
)
from autocoder.generation.generator import CodeGenerator
from autocoder.github.client import GitHubClient
from autocoder.github.submitter import ChangeRequestSubmitter
from autocoder.orchestrator import PipelineOrchestrator, RunResult


logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "error": logging.ERROR,
}


def configure_logging(level: str = "info") -> None:
    """Configure root logging for a CLI process."""
    logging.basicConfig(
        level=LOG_LEVEL_MAP.get(level.lower(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def log_configuration(settings: AutocoderSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Autocoder configuration:")
    logger.info(f"  Repository: {settings.repository}")
    logger.info(f"  GitHub Base URL: {settings.github_base_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(f"  Base Branch: {settings.base_branch}")
    logger.info(
        f"  Anthropic API Key: {_redact_secret(settings.anthropic_api_key)}"
    )
    logger.info(f"  Mock Mode: {settings.mock_mode}")
    logger.info(f"  LLM Model: {settings.llm_model}")
    logger.info(f"  Max Output Tokens: {settings.max_output_tokens}")
    logger.info(f"  Concurrency: {settings.concurrency}")
    logger.info(f"  Log Level: {settings.log_level}")


def build_orchestrator(
    settings: AutocoderSettings,
    github_client: GitHubClient,
    event_emitter: Optional[EventEmitter] = None,
) -> PipelineOrchestrator:
    """Wire all pipeline stages into a PipelineOrchestrator.

    Events always go to the log; event_emitter, when given, receives them too.
    """
    emitter = CompositeEventEmitter([LoggingEventEmitter()])
    if event_emitter is not None:
        emitter.add_emitter(event_emitter)

    analyzer = IssueAnalyzer(
        github_client=github_client,
        owner=settings.owner,
        repo=settings.repo_name,
    )

    generator = CodeGenerator(
        credential=settings.anthropic_api_key,
        mock_mode=settings.mock_mode,
        model=settings.llm_model,
        max_output_tokens=settings.max_output_tokens,
    )

    submitter = ChangeRequestSubmitter(
        github_client=github_client,
        owner=settings.owner,
        repo=settings.repo_name,
        base_branch=settings.base_branch,
    )

    return PipelineOrchestrator(
        analyzer=analyzer,
        generator=generator,
        submitter=submitter,
        repository=settings.repository,
        event_emitter=emitter,
    )


async def run_pipeline(
    settings: AutocoderSettings,
    issue_number: int,
    event_emitter: Optional[EventEmitter] = None,
) -> RunResult:
    """Run one issue through the pipeline.

    The run's emitters, including event_emitter, are closed when it ends.

    Raises:
        Exception: Whatever the failing stage raised, unchanged.
    """
    async with GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
    ) as github_client:
        orchestrator = build_orchestrator(settings, github_client, event_emitter)
        try:
            return await orchestrator.run(issue_number)
        finally:
            await orchestrator.event_emitter.close()
