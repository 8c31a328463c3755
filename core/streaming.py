"""Server-sent-event stream assembly for chat completions.

The upstream deep research model answers with ``text/event-stream`` bodies made
of ``data: {...}`` lines and a final ``data: [DONE]`` marker. The assembler
concatenates content deltas in arrival order, keeps the last-seen metadata,
and validates the reduced payload like a buffered response.

Updates:
  v0.2.1 - 2026-10-20 - Let empty citations or usage in later events replace earlier values.
  v0.2.0 - 2026-10-13 - Count skipped lines and process a trailing unterminated line.
  v0.1.0 - 2026-10-08 - Introduce SSE assembler with incremental UTF-8 decoding.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from .schemas import validate_completion

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from .schemas import ChatCompletionResponse

logger = logging.getLogger("perplexity_mcp.streaming")

SSE_DATA_PREFIX = "data:"
SSE_DONE_MARKER = "[DONE]"

# Scalars are kept only when truthy; collections overwrite whenever present.
_SCALAR_METADATA_KEYS: tuple[str, ...] = ("id", "model", "created")
_COLLECTION_METADATA_KEYS: tuple[str, ...] = ("citations", "usage")


@dataclass(slots=True)
class StreamAccumulator:
    """Mutable per-call state; owned by a single assembler and never shared."""

    fragments: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    skipped_lines: int = 0

    def absorb(self, event: Mapping[str, Any]) -> None:
        """Merge one parsed event: metadata is last-wins, content is appended."""
        for key in _SCALAR_METADATA_KEYS:
            value = event.get(key)
            if value:
                self.metadata[key] = value
        for key in _COLLECTION_METADATA_KEYS:
            if event.get(key) is not None:
                self.metadata[key] = event[key]
        delta = _extract_delta_content(event)
        if delta:
            self.fragments.append(delta)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "stop",
                    "message": {"role": "assistant", "content": "".join(self.fragments)},
                }
            ]
        }
        payload.update(self.metadata)
        return payload


def _extract_delta_content(event: Mapping[str, Any]) -> str:
    choices = event.get("choices")
    if not isinstance(choices, Sequence) or isinstance(choices, str) or not choices:
        return ""
    first = cast("Sequence[Any]", choices)[0]
    if not isinstance(first, Mapping):
        return ""
    delta = cast("Mapping[str, Any]", first).get("delta")
    if not isinstance(delta, Mapping):
        return ""
    content = cast("Mapping[str, Any]", delta).get("content")
    return content if isinstance(content, str) else ""


class SSEStreamAssembler:
    """Reduce a chunked SSE body into one :class:`ChatCompletionResponse`."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._accumulator = StreamAccumulator()

    @property
    def skipped_lines(self) -> int:
        """Number of ``data:`` lines dropped because they were not JSON objects."""
        return self._accumulator.skipped_lines

    def feed(self, chunk: bytes | str) -> None:
        """Consume one body chunk; an unterminated last line waits for the next chunk."""
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self._process_line(line)

    def finish(self) -> ChatCompletionResponse:
        """Flush buffered text and validate the assembled completion."""
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer.strip():
            self._process_line(self._buffer)
        self._buffer = ""
        if self._accumulator.skipped_lines:
            logger.debug(
                "Skipped %d malformed stream line(s)",
                self._accumulator.skipped_lines,
            )
        return validate_completion(self._accumulator.to_payload())

    def _process_line(self, line: str) -> None:
        stripped = line.strip()
        if not stripped or not stripped.startswith(SSE_DATA_PREFIX):
            return
        data = stripped[len(SSE_DATA_PREFIX) :].strip()
        if data == SSE_DONE_MARKER:
            return
        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            self._accumulator.skipped_lines += 1
            return
        if not isinstance(event, Mapping):
            self._accumulator.skipped_lines += 1
            return
        self._accumulator.absorb(cast("Mapping[str, Any]", event))


async def assemble_stream(chunks: AsyncIterable[bytes | str]) -> ChatCompletionResponse:
    """Drain *chunks* and return the validated, assembled completion."""
    assembler = SSEStreamAssembler()
    async for chunk in chunks:
        assembler.feed(chunk)
    return assembler.finish()


__all__ = [
    "SSE_DATA_PREFIX",
    "SSE_DONE_MARKER",
    "SSEStreamAssembler",
    "StreamAccumulator",
    "assemble_stream",
]
