"""Generative backend selection and the Anthropic backend adapter.

Backend selection is an explicit policy evaluated in fixed precedence:

1. FORCED: configuration requests mock mode
2. SENTINEL_CREDENTIAL: the credential is the literal "mock"
3. MISSING_CREDENTIAL: the credential is empty or absent
4. LIVE: anything else

The first three route generation to the fallback generator.

The live backend sends one single-turn prompt through LangChain's
ChatAnthropic and returns the reply as a list of typed content segments.
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Protocol, runtime_checkable

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


MOCK_CREDENTIAL = "mock"

LOW_BALANCE_STATUS = 400
LOW_BALANCE_MARKER = "credit balance"


class BackendDecision(str, Enum):
    """Outcome of backend selection.

    Attributes:
        FORCED: Mock mode requested by configuration.
        SENTINEL_CREDENTIAL: Credential equals the "mock" sentinel.
        MISSING_CREDENTIAL: No credential supplied.
        LIVE: Call the live backend.
    """

    FORCED = "forced"
    SENTINEL_CREDENTIAL = "sentinel_credential"
    MISSING_CREDENTIAL = "missing_credential"
    LIVE = "live"

    @property
    def uses_fallback(self) -> bool:
        return self is not BackendDecision.LIVE


def select_backend(mock_mode: bool, credential: Optional[str]) -> BackendDecision:
    """Decide between the live backend and the fallback generator.

    Example:
        >>> select_backend(True, "sk-ant-xxx")
        <BackendDecision.FORCED: 'forced'>
        >>> select_backend(False, "mock")
        <BackendDecision.SENTINEL_CREDENTIAL: 'sentinel_credential'>
        >>> select_backend(False, "")
        <BackendDecision.MISSING_CREDENTIAL: 'missing_credential'>
    """
    if mock_mode:
        return BackendDecision.FORCED
    if credential == MOCK_CREDENTIAL:
        return BackendDecision.SENTINEL_CREDENTIAL
    if not credential:
        return BackendDecision.MISSING_CREDENTIAL
    return BackendDecision.LIVE


class ContentSegment(BaseModel):
    """One typed segment of a backend reply."""

    type: str = Field(..., description='Segment type, e.g. "text"')
    text: Optional[str] = Field(default=None, description="Text for text segments")

    @property
    def is_text(self) -> bool:
        return self.type == "text"


class BackendResponse(BaseModel):
    """Reply from a generative backend."""

    content: List[ContentSegment] = Field(default_factory=list)

    def first_text(self) -> str:
        """Text of the first segment, or "" if it is not a text segment."""
        if not self.content:
            return ""
        first = self.content[0]
        if not first.is_text:
            return ""
        return first.text or ""


@runtime_checkable
class TextBackend(Protocol):
    """Interface of a single-request generative text backend."""

    async def complete(
        self,
        prompt: str,
        model: str,
        max_output_tokens: int,
    ) -> BackendResponse:
        ...


def is_low_balance_error(exc: BaseException) -> bool:
    """Check whether an error is the backend's low account balance rejection.

    Matches HTTP status 400 combined with a message mentioning the credit
    balance. The Anthropic SDK exposes the status as ``status_code``.
    """
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    if status != LOW_BALANCE_STATUS:
        return False
    message = getattr(exc, "message", None) or str(exc)
    return LOW_BALANCE_MARKER in str(message).lower()


def content_to_segments(content: Any) -> List[ContentSegment]:
    """Convert a LangChain message content value to typed segments.

    ChatAnthropic returns a plain string for a single text block and a list
    of blocks (strings or dicts with a "type" key) otherwise.
    """
    if isinstance(content, str):
        return [ContentSegment(type="text", text=content)]

    segments: List[ContentSegment] = []
    for block in content or []:
        if isinstance(block, str):
            segments.append(ContentSegment(type="text", text=block))
        elif isinstance(block, dict):
            block_type = str(block.get("type") or "unknown")
            text = block.get("text") if block_type == "text" else None
            segments.append(ContentSegment(type=block_type, text=text))
    return segments


class AnthropicBackend:
    """Live backend calling the Anthropic Messages API through LangChain.

    Attributes:
        api_key: Anthropic API key.
        timeout: Request timeout in seconds.
    """

    def __init__(self, api_key: str, timeout: float = 600.0):
        self.api_key = api_key
        self.timeout = timeout

    def _build_llm(self, model: str, max_output_tokens: int) -> ChatAnthropic:
        return ChatAnthropic(
            model=model,
            max_tokens=max_output_tokens,
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )

    async def complete(
        self,
        prompt: str,
        model: str,
        max_output_tokens: int,
    ) -> BackendResponse:
        """Send one prompt and return the reply segments.

        Raises:
            anthropic.APIError: Propagated unchanged from the SDK.
        """
        llm = self._build_llm(model, max_output_tokens)

        logger.debug(
            "Invoking generative backend",
            extra={
                "model": model,
                "max_output_tokens": max_output_tokens,
                "prompt_length": len(prompt),
            },
        )

        message = await llm.ainvoke([HumanMessage(content=prompt)])
        return BackendResponse(content=content_to_segments(message.content))
