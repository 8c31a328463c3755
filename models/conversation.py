"""Conversation message model shared by the completion tools.

Updates: v0.1.0 - 2026-10-06 - Introduce immutable ConversationMessage model.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MessageRole = Literal["system", "user", "assistant"]


class ConversationMessage(BaseModel):
    """Single turn of a conversation sent to the chat completions endpoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    role: MessageRole = Field(description="Role of the message sender")
    content: str = Field(min_length=1, description="The content of the message")

    def to_payload(self) -> dict[str, str]:
        """Return the wire representation expected by the upstream API."""
        return {"role": self.role, "content": self.content}


__all__ = ["ConversationMessage", "MessageRole"]
