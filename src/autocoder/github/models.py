"""GitHub request/response models for change-request submission.

The models use Pydantic for validation, consistent with the rest of the
pipeline.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class TreeEntry(BaseModel):
    """One file in a git tree creation request."""

    path: str = Field(..., min_length=1)
    content: str = ""
    mode: str = "100644"
    type: str = "blob"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "mode": self.mode,
            "type": self.type,
            "content": self.content,
        }


class PRCreateRequest(BaseModel):
    """Request to open a pull request.

    Attributes:
        title: Pull request title.
        body: Pull request body in markdown.
        head_branch: Branch containing the changes.
        base_branch: Branch the changes should be merged into.
    """

    title: str = Field(..., min_length=1)
    body: str = ""
    head_branch: str = Field(..., min_length=1)
    base_branch: str = Field(default="main", min_length=1)


class PRCreateResult(BaseModel):
    """A created pull request.

    Attributes:
        pr_number: Pull request number.
        pr_url: HTML URL of the pull request; the submission reference.
        branch: Head branch of the pull request.
        commit_sha: Commit holding the generated files.
        files: Paths committed, in order.
    """

    pr_number: int = Field(..., gt=0)
    pr_url: str = Field(..., min_length=1)
    branch: str = ""
    commit_sha: str = ""
    files: List[str] = Field(default_factory=list)

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "PRCreateResult":
        """Build a result from the GitHub pulls API response."""
        return cls(
            pr_number=data["number"],
            pr_url=data["html_url"],
            branch=(data.get("head") or {}).get("ref", ""),
        )
