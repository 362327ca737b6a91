"""Task description and label models for the analysis stage.

This module defines:
- TaskDescription: The normalized, immutable view of an issue that the
  generation stage consumes
- StringLabel / NamedLabel: The two shapes an issue label can take
- parse_label: Builds the matching label model from a raw value

The GitHub API returns labels as objects with a "name" key, while other
callers pass plain strings. Both are normalized to a plain name here so the
rest of the pipeline only ever sees strings.
"""

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class StringLabel(BaseModel):
    """A label given as a plain string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str

    @property
    def name(self) -> str:
        return self.value


class NamedLabel(BaseModel):
    """A label given as an object carrying a name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    name: str


Label = Union[StringLabel, NamedLabel]


def parse_label(raw: Any) -> Optional[Label]:
    """Build a label model from a raw label value.

    Accepts a plain string, a mapping with a string "name" key, or an object
    with a string ``name`` attribute. Anything else returns None.

    Example:
        >>> parse_label("bug").name
        'bug'
        >>> parse_label({"name": "priority:high", "color": "f00"}).name
        'priority:high'
        >>> parse_label(42) is None
        True
    """
    if isinstance(raw, str):
        return StringLabel(value=raw)

    if isinstance(raw, dict):
        name = raw.get("name")
    else:
        name = getattr(raw, "name", None)

    if isinstance(name, str):
        return NamedLabel(name=name)
    return None


def label_names(raw_labels: Any) -> List[str]:
    """Normalize a raw label collection to a list of names, in order."""
    names = []
    for raw in raw_labels or []:
        label = parse_label(raw)
        if label is not None:
            names.append(label.name)
    return names


class TaskDescription(BaseModel):
    """Normalized description of an issue's actionable content.

    Created once by the analysis stage and never mutated.

    Attributes:
        issue_number: The issue number within the repository.
        title: The issue title.
        body: The issue body; empty when the issue has none.
        requirements: Non-blank body lines, verbatim and in order.
        priority: Name of the first priority label, or the default priority.
    """

    model_config = ConfigDict(frozen=True)

    issue_number: int = Field(
        ...,
        gt=0,
        description="The issue number within the repository",
    )

    title: str = Field(
        ...,
        description="The issue title",
    )

    body: str = Field(
        default="",
        description="The issue body; empty when the issue has none",
    )

    requirements: List[str] = Field(
        default_factory=list,
        description="Non-blank body lines, verbatim and in order",
    )

    priority: str = Field(
        ...,
        description="Name of the first priority label, or the default priority",
    )
