"""Fenced-block response parser.

Turns free-form model output into an ordered FileSet. The model is asked to
emit each file as

    ```path/to/file.ext
    file content
    ```

The scanner walks the text with three explicit states:

- SEEKING_OPEN_FENCE: look for the next ``` token
- READING_LABEL: the rest of that line is the label; it must be non-empty
  and terminated by a newline
- READING_BODY: everything up to the FIRST following ``` token is the body

A body therefore ends at the first closing fence even when the file itself
contains a nested fence; the remainder of the nested content is scanned as
ordinary text. When an opening fence has no label line or no closing fence,
scanning resumes one character after that opening fence.

Blocks whose stripped label is not a valid relative path are dropped
silently; they never abort parsing of later blocks.
"""

import logging
from enum import Enum
from typing import Iterator, List, NamedTuple

from autocoder.generation.models import FileEdit, FileSet, is_valid_path


logger = logging.getLogger(__name__)


FENCE = "```"


class ScanState(str, Enum):
    """States of the fenced-block scanner."""

    SEEKING_OPEN_FENCE = "seeking_open_fence"
    READING_LABEL = "reading_label"
    READING_BODY = "reading_body"


class FencedBlock(NamedTuple):
    """A raw fenced block as found in the text, before trimming."""

    label: str
    body: str
    start: int
    end: int


def iter_fenced_blocks(text: str) -> Iterator[FencedBlock]:
    """Yield every fenced block in text, in order of first occurrence.

    Blocks never overlap. Labels and bodies are returned untrimmed.

    Args:
        text: Raw text to scan.

    Yields:
        FencedBlock for each complete block.
    """
    state = ScanState.SEEKING_OPEN_FENCE
    position = 0
    fence_start = 0
    label_start = 0
    label = ""
    body_start = 0

    while True:
        if state is ScanState.SEEKING_OPEN_FENCE:
            fence_start = text.find(FENCE, position)
            if fence_start == -1:
                return
            label_start = fence_start + len(FENCE)
            state = ScanState.READING_LABEL

        elif state is ScanState.READING_LABEL:
            newline = text.find("\n", label_start)
            if newline == -1 or newline == label_start:
                position = fence_start + 1
                state = ScanState.SEEKING_OPEN_FENCE
                continue
            label = text[label_start:newline]
            body_start = newline + 1
            state = ScanState.READING_BODY

        else:
            close = text.find(FENCE, body_start)
            if close == -1:
                position = fence_start + 1
                state = ScanState.SEEKING_OPEN_FENCE
                continue
            end = close + len(FENCE)
            yield FencedBlock(
                label=label,
                body=text[body_start:close],
                start=fence_start,
                end=end,
            )
            position = end
            state = ScanState.SEEKING_OPEN_FENCE


def parse_response(raw_text: str) -> FileSet:
    """Parse model output into a FileSet.

    Args:
        raw_text: Free-form text returned by the generative backend.

    Returns:
        FileSet with one edit per accepted block, in source order. Text
        without any fenced block yields an empty FileSet.
    """
    edits: List[FileEdit] = []
    dropped = 0

    for block in iter_fenced_blocks(raw_text or ""):
        path = block.label.strip()
        if not is_valid_path(path):
            dropped += 1
            continue
        edits.append(FileEdit(path=path, content=block.body.strip()))

    logger.debug(
        "Parsed model response",
        extra={
            "accepted_blocks": len(edits),
            "dropped_blocks": dropped,
            "text_length": len(raw_text or ""),
        },
    )

    return FileSet.from_edits(edits)
