"""Response schema validation for chat completion and search payloads.

Updates:
  v0.2.0 - 2026-10-14 - Reject citation arrays containing non-string entries.
  v0.1.1 - 2026-10-10 - Treat missing or non-list search results as an empty result set.
  v0.1.0 - 2026-10-07 - Introduce pydantic response models and validators.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from .exceptions import SchemaError, SchemaErrorKind


class _UpstreamModel(BaseModel):
    """Base for upstream payload models; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class ChatMessage(_UpstreamModel):
    role: str = "assistant"
    content: StrictStr


class Choice(_UpstreamModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class Usage(_UpstreamModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ChatCompletionResponse(_UpstreamModel):
    """Chat completion payload with at least one choice carrying text content."""

    id: str | None = None
    model: str | None = None
    created: int | None = None
    choices: list[Choice] = Field(min_length=1)
    citations: list[StrictStr] | None = None
    usage: Usage | None = None

    @property
    def content(self) -> str:
        return self.choices[0].message.content


class SearchResult(_UpstreamModel):
    """Single ranked hit returned by the search endpoint."""

    title: StrictStr
    url: StrictStr
    snippet: str | None = None
    date: str | None = None
    last_updated: str | None = None


class SearchResponse(_UpstreamModel):
    """Search payload; ``results`` keeps upstream relevance order."""

    id: str | None = None
    results: list[SearchResult] = Field(default_factory=list)


def _first_choice_content(choices: list[Any]) -> object:
    first = choices[0]
    if not isinstance(first, Mapping):
        return None
    message = cast("Mapping[str, Any]", first).get("message")
    if not isinstance(message, Mapping):
        return None
    return cast("Mapping[str, Any]", message).get("content")


def validate_completion(payload: object) -> ChatCompletionResponse:
    """Validate a parsed chat completion body.

    Raises:
      SchemaError: ``EMPTY_CHOICES`` when ``choices`` is missing or empty,
        ``MISSING_CONTENT`` when the first choice has no string
        ``message.content``, ``INVALID_CITATIONS`` for non-string citations,
        and ``INVALID_PAYLOAD`` for any other shape violation.
    """
    if not isinstance(payload, Mapping):
        raise SchemaError(SchemaErrorKind.INVALID_PAYLOAD, "expected a JSON object")
    body = cast("Mapping[str, Any]", payload)
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        raise SchemaError(SchemaErrorKind.EMPTY_CHOICES, "missing or empty choices array")
    if not isinstance(_first_choice_content(cast("list[Any]", choices)), str):
        raise SchemaError(SchemaErrorKind.MISSING_CONTENT, "missing message content")
    citations = body.get("citations")
    if citations is not None and (
        not isinstance(citations, list)
        or not all(isinstance(item, str) for item in cast("list[Any]", citations))
    ):
        raise SchemaError(
            SchemaErrorKind.INVALID_CITATIONS,
            "citations must be a list of URL strings",
        )
    try:
        return ChatCompletionResponse.model_validate(body)
    except ValidationError as exc:
        raise SchemaError(SchemaErrorKind.INVALID_PAYLOAD, str(exc)) from exc


def validate_search(payload: object) -> SearchResponse:
    """Validate a parsed search body, tolerating a missing ``results`` list.

    Raises:
      SchemaError: ``INVALID_PAYLOAD`` when the body is not an object or a
        result entry lacks a string title or URL.
    """
    if not isinstance(payload, Mapping):
        raise SchemaError(SchemaErrorKind.INVALID_PAYLOAD, "expected a JSON object")
    body = dict(cast("Mapping[str, Any]", payload))
    if not isinstance(body.get("results"), list):
        body["results"] = []
    try:
        return SearchResponse.model_validate(body)
    except ValidationError as exc:
        raise SchemaError(SchemaErrorKind.INVALID_PAYLOAD, str(exc)) from exc


__all__ = [
    "ChatCompletionResponse",
    "ChatMessage",
    "Choice",
    "SearchResponse",
    "SearchResult",
    "Usage",
    "validate_completion",
    "validate_search",
]
