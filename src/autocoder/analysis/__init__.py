"""Issue analysis.

Fetches a GitHub issue and derives a TaskDescription:
- Requirements from the non-blank lines of the body
- Priority from the first label containing "priority"
"""

from autocoder.analysis.analyzer import (
    DEFAULT_PRIORITY,
    IssueAnalyzer,
    extract_priority,
    extract_requirements,
)
from autocoder.analysis.models import (
    Label,
    NamedLabel,
    StringLabel,
    TaskDescription,
    label_names,
    parse_label,
)

__all__ = [
    "DEFAULT_PRIORITY",
    "IssueAnalyzer",
    "Label",
    "NamedLabel",
    "StringLabel",
    "TaskDescription",
    "extract_priority",
    "extract_requirements",
    "label_names",
    "parse_label",
]
