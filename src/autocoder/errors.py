"""Error taxonomy shared by the pipeline stages.

Every stage either returns a valid artifact or raises one of these (or an
error from a third-party client, which is propagated unchanged). The
orchestrator does not recover from any of them.

- NotFoundError: the work item does not exist
- TransportError: communication with a remote service failed
- ConflictError: the submission target collides with existing history
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for errors raised by the autocoder pipeline."""


class NotFoundError(PipelineError):
    """Raised when a requested remote resource does not exist."""


class TransportError(PipelineError):
    """Raised when a remote call fails."""


class ConflictError(PipelineError):
    """Raised when a write collides with existing remote state."""


class IssueNotFoundError(NotFoundError):
    """Raised when an issue number does not resolve in the repository.

    Attributes:
        repository: Full repository path in format "{owner}/{repo}".
        issue_number: The issue number that was requested.
    """

    def __init__(self, repository: str, issue_number: int):
        self.repository = repository
        self.issue_number = issue_number
        super().__init__(f"Issue not found: {repository}#{issue_number}")


class BranchConflictError(ConflictError):
    """Raised when the submission branch already exists.

    Attributes:
        repository: Full repository path in format "{owner}/{repo}".
        branch: The branch name that could not be created.
    """

    def __init__(
        self,
        repository: str,
        branch: str,
        message: Optional[str] = None,
    ):
        self.repository = repository
        self.branch = branch
        super().__init__(
            message or f"Branch {branch} already exists in {repository}"
        )
