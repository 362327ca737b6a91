"""Command-line entry point.

    autocoder run --issue 2 --log-level info
    autocoder demo

Exit codes: 0 when the run completes (including the no-files no-op), 1 on
any stage failure or missing/invalid configuration.
"""

import asyncio
import logging
import sys

import click
from pydantic import ValidationError

from autocoder.analysis.models import TaskDescription
from autocoder.config import LOG_LEVELS, get_settings
from autocoder.generation.fallback import FallbackGenerator
from autocoder.main import configure_logging, log_configuration, run_pipeline


logger = logging.getLogger(__name__)


DEMO_TASK = TaskDescription(
    issue_number=1,
    title="Mystery shopper report system",
    body=(
        "Build a tool to record mystery shopper visits.\n"
        "Summarize ratings and repeat intention across reports."
    ),
    requirements=[
        "Build a tool to record mystery shopper visits.",
        "Summarize ratings and repeat intention across reports.",
    ],
    priority="P2-Medium",
)


@click.group()
@click.version_option("0.1.0", message="autocoder v%(version)s")
def cli():
    """Turn GitHub issues into generated pull requests."""


@cli.command()
@click.option(
    "--issue",
    "issue_number",
    type=click.IntRange(min=1),
    default=None,
    help="Issue number to process.",
)
@click.option(
    "--repository",
    default=None,
    help="Target repository as owner/name (default: $GITHUB_REPOSITORY).",
)
@click.option(
    "--mock",
    is_flag=True,
    help="Force the fallback generator instead of the live backend.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Max concurrent agents (accepted, runs are sequential).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level: info, debug, error (default: info).",
)
def run(issue_number, repository, mock, concurrency, log_level):
    """Process one issue: analyze, generate, submit."""
    configure_logging(log_level or "info")

    try:
        settings = get_settings(
            repository=repository,
            mock_mode=True if mock else None,
            concurrency=concurrency,
            log_level=log_level,
        )
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    configure_logging(settings.log_level)

    if issue_number is None:
        logger.error("No issue number provided. Use --issue <number>.")
        sys.exit(1)

    log_configuration(settings)

    try:
        result = asyncio.run(run_pipeline(settings, issue_number))
    except Exception as e:
        logger.error(
            "Execution failed: %s",
            e,
            extra={"error_type": type(e).__name__, "issue_number": issue_number},
        )
        sys.exit(1)

    if result.pr_url:
        click.echo(result.pr_url)
    else:
        click.echo(f"No files generated for issue #{issue_number}; nothing submitted")


@cli.command()
@click.option(
    "--show-content",
    is_flag=True,
    help="Print the content of every generated file.",
)
def demo(show_content):
    """Run the fallback generator offline and print its file set."""
    file_set = FallbackGenerator().generate(DEMO_TASK)

    click.echo(file_set.summary)
    for edit in file_set.edits:
        click.echo(f"- {edit.path}")
        if show_content:
            click.echo(edit.content)
            click.echo("")


def main():
    cli()


if __name__ == "__main__":
    main()
