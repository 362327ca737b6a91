"""Generated file models for the generation stage.

This module defines:
- FileEdit: A single proposed file (relative path and full content)
- FileSet: The ordered collection of edits produced for one issue
- is_valid_path: The path rule every FileEdit must satisfy

Both the response parser and the fallback generator produce FileSets, and
the submission stage consumes them in order.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def is_valid_path(path: str) -> bool:
    """Check whether a string looks like a relative file path.

    A valid path is non-empty, contains no whitespace, and contains at
    least one "/" or ".".

    Example:
        >>> is_valid_path("src/a.ts")
        True
        >>> is_valid_path("notes")
        False
        >>> is_valid_path("my file.ts")
        False
    """
    if not path:
        return False
    if any(ch.isspace() for ch in path):
        return False
    return "/" in path or "." in path


def build_summary(count: int) -> str:
    """Build the standard summary for a parsed file set."""
    return f"Generated {count} files for implementation"


class FileEdit(BaseModel):
    """A single file produced by the generation stage.

    Attributes:
        path: Relative file path inside the target repository.
        content: Full file content.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        min_length=1,
        description="Relative file path inside the target repository",
    )

    content: str = Field(
        default="",
        description="Full file content",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject paths that do not look like relative file paths."""
        if not is_valid_path(v):
            raise ValueError(f"Invalid file path: {v!r}")
        return v


class FileSet(BaseModel):
    """Ordered set of file edits for one issue.

    Order is the order of appearance in the source text, which keeps
    submission diffs deterministic. Duplicate paths are kept as-is.

    Attributes:
        edits: File edits in order of appearance.
        summary: Human-readable description of the set.
    """

    model_config = ConfigDict(frozen=True)

    edits: List[FileEdit] = Field(
        default_factory=list,
        description="File edits in order of appearance",
    )

    summary: str = Field(
        default_factory=lambda: build_summary(0),
        description="Human-readable description of the set",
    )

    @property
    def paths(self) -> List[str]:
        """Paths of all edits, in order."""
        return [edit.path for edit in self.edits]

    @property
    def is_empty(self) -> bool:
        """True when the set holds no edits."""
        return not self.edits

    def __len__(self) -> int:
        return len(self.edits)

    @classmethod
    def from_edits(cls, edits: List[FileEdit]) -> "FileSet":
        """Create a FileSet with the standard summary."""
        return cls(edits=list(edits), summary=build_summary(len(edits)))
