"""Pipeline orchestrator connecting the three stages.

Drives one issue through:
    analysis → generation → submission

Each run gets its own RunStateMachine. A stage error transitions the run to
FAILED, emits an ERROR event and is re-raised unchanged; nothing is retried
or recovered here. An empty file set ends the run in DONE without calling
the submission stage.

The orchestrator only sequences: it passes each stage's artifact to the
next one without transforming it.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from autocoder.analysis.analyzer import IssueAnalyzer
from autocoder.analysis.models import TaskDescription
from autocoder.events.emitter import EventEmitter, LoggingEventEmitter
from autocoder.events.models import EventType, PipelineEvent
from autocoder.generation.generator import CodeGenerator
from autocoder.generation.models import FileSet
from autocoder.github.submitter import ChangeRequestSubmitter
from autocoder.state.machine import RunStateMachine
from autocoder.state.models import RunState, StateTransition


logger = logging.getLogger(__name__)


class RunResult(BaseModel):
    """Outcome of a successful run.

    Attributes:
        issue_number: The processed issue.
        state: Final run state (always DONE for a returned result).
        task: The analyzed task.
        file_set: The generated files.
        pr_url: Pull request URL, None when nothing was submitted.
        history: Every state transition of the run.
    """

    issue_number: int
    state: RunState
    task: TaskDescription
    file_set: FileSet
    pr_url: Optional[str] = None
    history: List[StateTransition] = Field(default_factory=list)

    @property
    def submitted(self) -> bool:
        return self.pr_url is not None


class PipelineOrchestrator:
    """Orchestrates the issue-to-pull-request pipeline.

    Attributes:
        analyzer: Analysis stage.
        generator: Generation stage.
        submitter: Submission stage.
        repository: Full repository path in format "{owner}/{repo}".
        event_emitter: Emits pipeline events for observability.
        state_machine: State machine of the most recent run.
    """

    def __init__(
        self,
        analyzer: IssueAnalyzer,
        generator: CodeGenerator,
        submitter: ChangeRequestSubmitter,
        repository: str,
        event_emitter: Optional[EventEmitter] = None,
    ):
        self.analyzer = analyzer
        self.generator = generator
        self.submitter = submitter
        self.repository = repository
        self.event_emitter = event_emitter or LoggingEventEmitter()
        self.state_machine: Optional[RunStateMachine] = None

    async def run(self, issue_number: int) -> RunResult:
        """Drive an issue through the full pipeline.

        Args:
            issue_number: The issue to process.

        Returns:
            RunResult in state DONE.

        Raises:
            Exception: Whatever the failing stage raised, unchanged.
        """
        issue_id = f"{self.repository}#{issue_number}"
        machine = RunStateMachine(issue_id)
        self.state_machine = machine

        logger.info("Starting pipeline run", extra={"issue_id": issue_id})

        await self._transition(machine, RunState.ANALYZING)
        try:
            task = await self.analyzer.analyze(issue_number)
        except Exception as exc:
            await self._fail(machine, exc)
            raise

        await self._transition(machine, RunState.GENERATING)
        try:
            file_set = await self.generator.generate(task)
        except Exception as exc:
            await self._fail(machine, exc)
            raise

        pr_url: Optional[str] = None

        if file_set.is_empty:
            logger.info(
                "No files generated, skipping submission",
                extra={"issue_id": issue_id},
            )
        else:
            await self._transition(
                machine, RunState.SUBMITTING, {"files": len(file_set)}
            )
            try:
                result = await self.submitter.submit(
                    task.issue_number, file_set, task.title
                )
            except Exception as exc:
                await self._fail(machine, exc)
                raise
            pr_url = result.pr_url

        await self._transition(machine, RunState.DONE, {"pr_url": pr_url})
        await self._emit(
            machine,
            EventType.COMPLETION,
            {"files": len(file_set), "pr_url": pr_url},
        )

        logger.info(
            "Pipeline run completed",
            extra={"issue_id": issue_id, "pr_url": pr_url},
        )

        return RunResult(
            issue_number=issue_number,
            state=machine.current_state,
            task=task,
            file_set=file_set,
            pr_url=pr_url,
            history=list(machine.history),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _transition(
        self,
        machine: RunStateMachine,
        to_state: RunState,
        details: Optional[dict] = None,
    ) -> None:
        """Transition state and emit a state-transition event."""
        transition = machine.transition(to_state, details)
        await self._emit(
            machine,
            EventType.STATE_TRANSITION,
            {
                "from_state": transition.from_state.value,
                "to_state": transition.to_state.value,
            },
        )

    async def _fail(self, machine: RunStateMachine, exc: Exception) -> None:
        """Transition to FAILED and emit an error event."""
        stage = machine.current_state.value
        error_message = f"{stage}: {exc}"

        logger.error(
            "Pipeline stage failed",
            extra={
                "issue_id": machine.run_id,
                "stage": stage,
                "error_type": type(exc).__name__,
            },
        )

        machine.transition(RunState.FAILED, {"error": error_message})
        await self._emit(
            machine,
            EventType.ERROR,
            {
                "stage": stage,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )

    async def _emit(
        self,
        machine: RunStateMachine,
        event_type: EventType,
        details: dict,
    ) -> None:
        """Emit an event, logging emitter failures without disrupting the run."""
        event = PipelineEvent(
            event_type=event_type,
            issue_id=machine.run_id,
            repository=self.repository,
            details=details,
        )
        try:
            await self.event_emitter.emit(event)
        except Exception:
            logger.exception(
                "Failed to emit pipeline event",
                extra={
                    "event_type": event.event_type.value,
                    "issue_id": event.issue_id,
                },
            )
