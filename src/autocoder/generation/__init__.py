"""Code generation.

Selects between the live generative backend and the deterministic fallback,
and parses model output into an ordered FileSet.
"""

from autocoder.generation.backend import (
    AnthropicBackend,
    BackendDecision,
    BackendResponse,
    ContentSegment,
    TextBackend,
    is_low_balance_error,
    select_backend,
)
from autocoder.generation.fallback import FALLBACK_PATHS, FallbackGenerator
from autocoder.generation.generator import CodeGenerator, build_prompt
from autocoder.generation.models import FileEdit, FileSet, is_valid_path
from autocoder.generation.parser import iter_fenced_blocks, parse_response

__all__ = [
    "AnthropicBackend",
    "BackendDecision",
    "BackendResponse",
    "CodeGenerator",
    "ContentSegment",
    "FALLBACK_PATHS",
    "FallbackGenerator",
    "FileEdit",
    "FileSet",
    "TextBackend",
    "build_prompt",
    "is_low_balance_error",
    "is_valid_path",
    "iter_fenced_blocks",
    "parse_response",
    "select_backend",
]
