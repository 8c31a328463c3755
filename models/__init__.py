"""Data models for the Perplexity MCP server.

Updates: v0.2.0 - 2026-10-07 - Export SearchRequest dataclass.
Updates: v0.1.0 - 2026-10-06 - Export conversation and completion models.
"""

from .completion import CompletionRequest, CompletionResult
from .conversation import ConversationMessage
from .search import SearchRequest

__all__ = [
    "CompletionRequest",
    "CompletionResult",
    "ConversationMessage",
    "SearchRequest",
]
