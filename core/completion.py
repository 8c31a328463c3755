"""Chat completion engine backing the ask, research, and reason tools.

Updates:
  v0.3.0 - 2026-10-15 - Route calls through the shared PerplexityAPI gateway.
  v0.2.0 - 2026-10-12 - Stream deep research responses and assemble SSE chunks.
  v0.1.1 - 2026-10-10 - Strip <think> spans when callers request it.
  v0.1.0 - 2026-10-08 - Introduce CompletionEngine with citation footnotes.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from models.completion import CompletionRequest, CompletionResult

from .api import CHAT_COMPLETIONS_PATH, PerplexityAPI
from .exceptions import SchemaError, SchemaErrorKind
from .messages import validate_messages
from .schemas import validate_completion
from .streaming import assemble_stream

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from config.settings import SettingsProvider
    from models.completion import ReasoningEffort, SearchContextSize
    from models.conversation import ConversationMessage

    from .dispatch import HttpDispatcher
    from .filters import FilterSet
    from .schemas import ChatCompletionResponse

ASK_MODEL = "sonar-pro"
RESEARCH_MODEL = "sonar-deep-research"
REASON_MODEL = "sonar-reasoning-pro"

# Only the deep research model answers as an event stream.
STREAMING_MODELS: frozenset[str] = frozenset({RESEARCH_MODEL})

_THINKING_PATTERN = re.compile(r"<think>[\s\S]*?</think>")

logger = logging.getLogger("perplexity_mcp.completion")


def strip_thinking_tokens(content: str) -> str:
    """Remove every ``<think>...</think>`` span and trim surrounding whitespace."""
    return _THINKING_PATTERN.sub("", content).strip()


def uses_streaming(model: str) -> bool:
    return model in STREAMING_MODELS


async def _consume_stream(response: httpx.Response) -> ChatCompletionResponse:
    return await assemble_stream(response.aiter_bytes())


async def _consume_json(response: httpx.Response) -> ChatCompletionResponse:
    raw = await response.aread()
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise SchemaError(
            SchemaErrorKind.INVALID_PAYLOAD,
            f"failed to parse JSON response from Perplexity API: {exc}",
        ) from exc
    return validate_completion(payload)


class CompletionEngine:
    """Run one chat completion call end to end."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        *,
        dispatcher: HttpDispatcher | None = None,
    ) -> None:
        """Wire the engine to the configuration capability and dispatcher."""
        self._api = PerplexityAPI(settings_provider, dispatcher)

    async def fetch(
        self,
        messages: Sequence[ConversationMessage | dict[str, str]],
        *,
        model: str = ASK_MODEL,
        strip_thinking: bool = False,
        filters: FilterSet | None = None,
        reasoning_effort: ReasoningEffort | None = None,
        search_context_size: SearchContextSize | None = None,
        tool_name: str = "chat completion",
    ) -> CompletionResult:
        """Return the answer text and citations without rendering footnotes.

        Raises:
          RequestValidationError: When messages are malformed.
          DispatchError: When the upstream call fails.
          SchemaError: When the upstream payload has an unexpected shape.
        """
        request = CompletionRequest(
            messages=validate_messages(messages, tool_name),
            model=model,
            filters=filters,
            reasoning_effort=reasoning_effort,
            search_context_size=search_context_size,
        )
        stream = uses_streaming(model)
        response = await self._api.post(
            CHAT_COMPLETIONS_PATH,
            request.to_payload(stream=stream),
            consume=_consume_stream if stream else _consume_json,
        )
        content = response.content
        if strip_thinking:
            content = strip_thinking_tokens(content)
        if response.usage is not None:
            logger.debug("Completion usage for %s: %s", model, response.usage.model_dump())
        return CompletionResult(text=content, citations=list(response.citations or []))

    async def complete(
        self,
        messages: Sequence[ConversationMessage | dict[str, str]],
        *,
        model: str = ASK_MODEL,
        strip_thinking: bool = False,
        filters: FilterSet | None = None,
        reasoning_effort: ReasoningEffort | None = None,
        search_context_size: SearchContextSize | None = None,
        tool_name: str = "chat completion",
    ) -> str:
        """Return the answer text with its numbered citation block appended."""
        result = await self.fetch(
            messages,
            model=model,
            strip_thinking=strip_thinking,
            filters=filters,
            reasoning_effort=reasoning_effort,
            search_context_size=search_context_size,
            tool_name=tool_name,
        )
        return result.render()


__all__ = [
    "ASK_MODEL",
    "REASON_MODEL",
    "RESEARCH_MODEL",
    "STREAMING_MODELS",
    "CompletionEngine",
    "strip_thinking_tokens",
    "uses_streaming",
]
