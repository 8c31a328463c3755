"""Completion request and result data models.

Updates: v0.2.0 - 2026-10-12 - Add web_search_options and reasoning effort serialisation.
Updates: v0.1.0 - 2026-10-06 - Introduce CompletionRequest and CompletionResult dataclasses.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from core.filters import FilterSet

    from .conversation import ConversationMessage

ReasoningEffort = Literal["minimal", "low", "medium", "high"]
SearchContextSize = Literal["low", "medium", "high"]

CITATIONS_HEADER = "\n\nCitations:\n"


@dataclass(slots=True, frozen=True)
class CompletionRequest:
    """Outbound chat completion request built fresh for every tool call."""

    messages: Sequence[ConversationMessage]
    model: str
    filters: FilterSet | None = None
    reasoning_effort: ReasoningEffort | None = None
    search_context_size: SearchContextSize | None = None

    def to_payload(self, *, stream: bool = False) -> dict[str, Any]:
        """Serialise the request, omitting every optional field left unset."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_payload() for message in self.messages],
        }
        if stream:
            payload["stream"] = True
        if self.filters is not None:
            payload.update(self.filters.to_request_fields())
        if self.search_context_size:
            payload["web_search_options"] = {"search_context_size": self.search_context_size}
        if self.reasoning_effort:
            payload["reasoning_effort"] = self.reasoning_effort
        return payload


@dataclass(slots=True)
class CompletionResult:
    """Generated answer text plus the ordered source citations."""

    text: str
    citations: list[str] = field(default_factory=list)

    def render(self) -> str:
        """Return the text with a 1-based citation footnote block appended."""
        if not self.citations:
            return self.text
        lines = [
            f"[{index}] {citation}\n" for index, citation in enumerate(self.citations, start=1)
        ]
        return self.text + CITATIONS_HEADER + "".join(lines)


__all__ = [
    "CITATIONS_HEADER",
    "CompletionRequest",
    "CompletionResult",
    "ReasoningEffort",
    "SearchContextSize",
]
