"""Code generation stage.

Turns a TaskDescription into a FileSet, either by prompting the live
generative backend and parsing its fenced-block reply, or by returning the
fallback generator's demonstration project.

The live call is a single request with no retry. The one error recovered
locally is the backend's low-balance rejection (HTTP 400 mentioning the
credit balance), which falls back to the demonstration project; every other
error propagates unchanged.
"""

import logging
from typing import Optional

from autocoder.analysis.models import TaskDescription
from autocoder.config import DEFAULT_MODEL
from autocoder.generation.backend import (
    AnthropicBackend,
    BackendDecision,
    TextBackend,
    is_low_balance_error,
    select_backend,
)
from autocoder.generation.fallback import FallbackGenerator
from autocoder.generation.models import FileSet
from autocoder.generation.parser import parse_response


logger = logging.getLogger(__name__)


OUTPUT_INSTRUCTIONS = """## Instructions
1. Implement the issue in TypeScript with strict typing.
2. Emit every file as a fenced block whose first line is the file path:

```path/to/file.ext
file content
```

3. Required files:
   - src/index.ts - main entry point
   - src/types.ts - type definitions
   - any other files the implementation needs

4. Write production-quality code.

Output format:
Start each file with ``` immediately followed by its path."""


def build_prompt(task: TaskDescription) -> str:
    """Build the single instructional prompt for a task.

    The prompt embeds the title, body and numbered requirements followed by
    the fixed output instructions.
    """
    requirements = "\n".join(
        f"{index}. {requirement}"
        for index, requirement in enumerate(task.requirements, start=1)
    )
    return (
        "You are a TypeScript expert. Implement the following issue.\n\n"
        f"# Issue: {task.title}\n\n"
        f"{task.body}\n\n"
        "## Requirements\n"
        f"{requirements}\n\n"
        f"{OUTPUT_INSTRUCTIONS}"
    )


class CodeGenerator:
    """Generation stage with live/fallback backend selection.

    The backend decision is made once, at construction, from the mock flag
    and the credential.

    Attributes:
        decision: The backend selection outcome.
        model: Model identifier for live calls.
        max_output_tokens: Output-length ceiling for live calls.
        backend: Live backend, None when the fallback is selected.
        fallback: Fallback generator.
    """

    def __init__(
        self,
        credential: Optional[str],
        mock_mode: bool = False,
        model: str = DEFAULT_MODEL,
        max_output_tokens: int = 4096,
        backend: Optional[TextBackend] = None,
        fallback: Optional[FallbackGenerator] = None,
    ):
        self.decision = select_backend(mock_mode, credential)
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.fallback = fallback or FallbackGenerator()

        if self.decision is BackendDecision.LIVE:
            self.backend: Optional[TextBackend] = backend or AnthropicBackend(
                api_key=credential or ""
            )
        else:
            self.backend = None

    @property
    def uses_fallback(self) -> bool:
        return self.decision.uses_fallback

    async def generate(self, task: TaskDescription) -> FileSet:
        """Generate the file set for a task.

        Args:
            task: The analyzed issue.

        Returns:
            FileSet parsed from the backend reply, or the fallback set.

        Raises:
            Exception: Any backend error other than the low-balance
                rejection, unchanged.
        """
        logger.info(
            "Generating code",
            extra={
                "issue_number": task.issue_number,
                "title": task.title[:100],
                "backend": self.decision.value,
            },
        )

        if self.backend is None:
            logger.info(
                "Using fallback generation",
                extra={"reason": self.decision.value},
            )
            return self.fallback.generate(task)

        prompt = build_prompt(task)

        try:
            response = await self.backend.complete(
                prompt, self.model, self.max_output_tokens
            )
        except Exception as e:
            if is_low_balance_error(e):
                logger.warning(
                    "Generative backend credit balance low, falling back",
                    extra={"issue_number": task.issue_number, "error": str(e)},
                )
                return self.fallback.generate(task)
            raise

        file_set = parse_response(response.first_text())

        logger.info(
            "Code generated",
            extra={
                "issue_number": task.issue_number,
                "files": len(file_set),
                "paths": file_set.paths,
            },
        )

        return file_set
