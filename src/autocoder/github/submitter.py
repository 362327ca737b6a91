"""Change-request submission stage.

Packages a FileSet into a pull request:
1. Read the base branch head and its tree
2. Commit every edit as one tree/commit on top of the base tree
3. Create the issue branch (autocoder/issue-{n}) at the new commit
4. Open a pull request that closes the originating issue

Trees and commits are unreachable objects until the branch ref exists, so a
run that fails before step 3 leaves no branch behind. A branch that already
exists raises BranchConflictError. Every other failure propagates as
GitHubAPIError.
"""

import logging
from typing import Dict, List

from autocoder.errors import BranchConflictError
from autocoder.generation.models import FileEdit, FileSet
from autocoder.github.client import GitHubAPIError, GitHubClient
from autocoder.github.models import PRCreateRequest, PRCreateResult, TreeEntry


logger = logging.getLogger(__name__)


BRANCH_PREFIX = "autocoder"

# GitHub answers 422 for "Reference already exists"
CONFLICT_STATUS = 422


def build_branch_name(issue_number: int) -> str:
    return f"{BRANCH_PREFIX}/issue-{issue_number}"


def build_pr_title(issue_number: int, title: str) -> str:
    """Build the pull request title.

    Example:
        >>> build_pr_title(99, "Update docs")
        'Fix #99: Update docs'
    """
    return f"Fix #{issue_number}: {title}"


def build_commit_message(issue_number: int, title: str) -> str:
    return f"Implement #{issue_number}: {title}"


def build_pr_body(issue_number: int, summary: str, paths: List[str]) -> str:
    """Build the pull request body.

    Includes the generation summary, the changed files in commit order,
    and a closing keyword linking the issue.
    """
    sections = [
        "## Summary",
        "",
        summary,
        "",
        "## Files Changed",
        "",
    ]
    sections.extend(f"- `{path}`" for path in paths)
    sections.extend(
        [
            "",
            f"Closes #{issue_number}",
            "",
            "---",
            "*This pull request was generated automatically by autocoder.*",
        ]
    )
    return "\n".join(sections)


def collapse_duplicate_paths(edits: List[FileEdit]) -> List[FileEdit]:
    """Keep one edit per path: the last content, at the first position.

    A git tree cannot hold the same path twice, so repeated paths from the
    parser are merged here.
    """
    positions: Dict[str, int] = {}
    collapsed: List[FileEdit] = []
    for edit in edits:
        if edit.path in positions:
            collapsed[positions[edit.path]] = edit
        else:
            positions[edit.path] = len(collapsed)
            collapsed.append(edit)
    return collapsed


class ChangeRequestSubmitter:
    """Opens pull requests for generated file sets.

    Attributes:
        github_client: GitHub API client.
        owner: Repository owner (user or organization).
        repo: Repository name.
        base_branch: Branch the pull request targets.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        owner: str,
        repo: str,
        base_branch: str = "main",
    ):
        self.github_client = github_client
        self.owner = owner
        self.repo = repo
        self.base_branch = base_branch

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def submit(
        self,
        issue_number: int,
        file_set: FileSet,
        title: str,
    ) -> PRCreateResult:
        """Commit the file set on a new branch and open a pull request.

        Args:
            issue_number: The originating issue number.
            file_set: Generated files, committed in order.
            title: The issue title, used for the PR title and commit.

        Returns:
            PRCreateResult whose pr_url is the submission reference.

        Raises:
            BranchConflictError: If the branch already exists.
            GitHubAPIError: If GitHub cannot be reached or rejects a call.
        """
        branch = build_branch_name(issue_number)
        edits = collapse_duplicate_paths(file_set.edits)

        if len(edits) != len(file_set.edits):
            logger.warning(
                "Duplicate paths in file set, keeping last content",
                extra={
                    "issue_number": issue_number,
                    "edits": len(file_set.edits),
                    "unique_paths": len(edits),
                },
            )

        logger.info(
            "Submitting change request",
            extra={
                "repository": self.repository,
                "issue_number": issue_number,
                "branch": branch,
                "files": len(edits),
            },
        )

        base_sha = await self.github_client.get_branch_sha(
            self.owner, self.repo, self.base_branch
        )
        base_tree = await self.github_client.get_commit_tree_sha(
            self.owner, self.repo, base_sha
        )
        tree_sha = await self.github_client.create_tree(
            self.owner,
            self.repo,
            base_tree,
            [TreeEntry(path=edit.path, content=edit.content) for edit in edits],
        )
        commit_sha = await self.github_client.create_commit(
            self.owner,
            self.repo,
            build_commit_message(issue_number, title),
            tree_sha,
            base_sha,
        )

        # The ref is the first visible write; failures above leave no branch
        try:
            await self.github_client.create_branch(
                self.owner, self.repo, branch, commit_sha
            )
        except GitHubAPIError as e:
            if e.status_code == CONFLICT_STATUS:
                raise BranchConflictError(self.repository, branch) from e
            raise

        result = await self.github_client.create_pr(
            self.owner,
            self.repo,
            PRCreateRequest(
                title=build_pr_title(issue_number, title),
                body=build_pr_body(
                    issue_number, file_set.summary, [edit.path for edit in edits]
                ),
                head_branch=branch,
                base_branch=self.base_branch,
            ),
        )

        return result.model_copy(
            update={
                "branch": branch,
                "commit_sha": commit_sha,
                "files": [edit.path for edit in edits],
            }
        )
