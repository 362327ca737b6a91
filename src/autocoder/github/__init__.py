"""GitHub API client and change-request submission."""

from autocoder.github.client import GitHubAPIError, GitHubClient
from autocoder.github.models import PRCreateRequest, PRCreateResult, TreeEntry
from autocoder.github.submitter import ChangeRequestSubmitter

__all__ = [
    "ChangeRequestSubmitter",
    "GitHubAPIError",
    "GitHubClient",
    "PRCreateRequest",
    "PRCreateResult",
    "TreeEntry",
]
