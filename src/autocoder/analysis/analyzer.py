"""Issue analysis stage.

Fetches an issue from GitHub and derives a TaskDescription:
- Requirements: every non-blank line of the body, verbatim and in order
- Priority: the first label whose name contains "priority", otherwise
  DEFAULT_PRIORITY

Both heuristics never fail on missing
data. A missing issue raises IssueNotFoundError; any other GitHub failure
propagates as GitHubAPIError.
"""

import logging
from typing import Any, List

from autocoder.analysis.models import TaskDescription, label_names
from autocoder.errors import IssueNotFoundError
from autocoder.github.client import GitHubAPIError, GitHubClient


logger = logging.getLogger(__name__)


DEFAULT_PRIORITY = "P2-Medium"

PRIORITY_MARKER = "priority"


def extract_requirements(body: str) -> List[str]:
    """Split an issue body into requirement lines.

    Example:
        >>> extract_requirements("line1\\nline2\\n\\nline3")
        ['line1', 'line2', 'line3']
    """
    return [line for line in (body or "").split("\n") if line.strip()]


def extract_priority(raw_labels: Any) -> str:
    """Pick the priority from a label collection.

    Labels may be plain strings or objects with a name. The first name
    containing "priority" wins; with no match the default is returned.

    Example:
        >>> extract_priority(["bug", "priority:high"])
        'priority:high'
        >>> extract_priority(["bug"])
        'P2-Medium'
    """
    for name in label_names(raw_labels):
        if PRIORITY_MARKER in name:
            return name
    return DEFAULT_PRIORITY


class IssueAnalyzer:
    """Reads issues from one repository and normalizes them into tasks.

    Attributes:
        github_client: GitHub API client used to fetch issues.
        owner: Repository owner (user or organization).
        repo: Repository name.
    """

    def __init__(self, github_client: GitHubClient, owner: str, repo: str):
        self.github_client = github_client
        self.owner = owner
        self.repo = repo

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def analyze(self, issue_number: int) -> TaskDescription:
        """Fetch an issue and build its TaskDescription.

        Args:
            issue_number: Issue number to analyze.

        Returns:
            TaskDescription for the issue.

        Raises:
            IssueNotFoundError: If the issue does not exist.
            GitHubAPIError: If GitHub cannot be reached or rejects the call.
        """
        logger.info(
            "Analyzing issue",
            extra={"repository": self.repository, "issue_number": issue_number},
        )

        try:
            issue = await self.github_client.get_issue(
                self.owner, self.repo, issue_number
            )
        except GitHubAPIError as e:
            if e.status_code == 404:
                raise IssueNotFoundError(self.repository, issue_number) from e
            raise

        body = issue.get("body") or ""

        task = TaskDescription(
            issue_number=issue_number,
            title=issue.get("title") or "",
            body=body,
            requirements=extract_requirements(body),
            priority=extract_priority(issue.get("labels")),
        )

        logger.info(
            "Issue analyzed",
            extra={
                "issue_number": issue_number,
                "requirements_count": len(task.requirements),
                "priority": task.priority,
            },
        )

        return task
