"""Validation for conversation message arrays received from MCP clients.

Updates:
  v0.1.0 - 2026-10-08 - Extract message validation shared by the completion tools.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from models.conversation import ConversationMessage

from .exceptions import MessageValidationError

_ROLES = ("system", "user", "assistant")


def validate_messages(messages: object, tool_name: str) -> list[ConversationMessage]:
    """Return *messages* as validated :class:`ConversationMessage` objects, in order.

    Raises:
      MessageValidationError: When the array or any entry is malformed.
    """
    if not isinstance(messages, (list, tuple)):
        raise MessageValidationError(
            f"Invalid arguments for {tool_name}: 'messages' must be an array"
        )
    if not messages:
        raise MessageValidationError(
            f"Invalid arguments for {tool_name}: 'messages' must not be empty"
        )
    validated: list[ConversationMessage] = []
    for index, entry in enumerate(cast("list[Any] | tuple[Any, ...]", messages)):
        if isinstance(entry, ConversationMessage):
            validated.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise MessageValidationError(f"Invalid message at index {index}: must be an object")
        mapping = cast("Mapping[str, Any]", entry)
        role = mapping.get("role")
        if not isinstance(role, str) or role not in _ROLES:
            raise MessageValidationError(
                f"Invalid message at index {index}: 'role' must be one of {', '.join(_ROLES)}"
            )
        content = mapping.get("content")
        if not isinstance(content, str) or not content:
            raise MessageValidationError(
                f"Invalid message at index {index}: 'content' must be a non-empty string"
            )
        validated.append(ConversationMessage(role=role, content=content))  # type: ignore[arg-type]
    return validated


__all__ = ["validate_messages"]
