"""Core request/response layer for the Perplexity MCP server.

Updates:
  v0.3.0 - 2026-10-15 - Export the shared PerplexityAPI gateway.
  v0.2.0 - 2026-10-12 - Export streaming assembler and dispatcher.
  v0.1.0 - 2026-10-06 - Surface filter validation and engines.
"""

from .api import PerplexityAPI, build_headers
from .completion import (
    ASK_MODEL,
    REASON_MODEL,
    RESEARCH_MODEL,
    CompletionEngine,
    strip_thinking_tokens,
)
from .dispatch import HttpDispatcher
from .exceptions import (
    DispatchError,
    FilterError,
    FilterErrorKind,
    MessageValidationError,
    NetworkError,
    PerplexityMCPError,
    QueryValidationError,
    RequestTimeoutError,
    RequestValidationError,
    SchemaError,
    SchemaErrorKind,
    UpstreamError,
)
from .filters import FilterSet, build_filter_set, validate_filters
from .messages import validate_messages
from .schemas import ChatCompletionResponse, SearchResponse, validate_completion, validate_search
from .search import SearchEngine, build_search_request, format_search_results
from .streaming import SSEStreamAssembler, assemble_stream

__all__ = [
    "ASK_MODEL",
    "REASON_MODEL",
    "RESEARCH_MODEL",
    "ChatCompletionResponse",
    "CompletionEngine",
    "DispatchError",
    "FilterError",
    "FilterErrorKind",
    "FilterSet",
    "HttpDispatcher",
    "MessageValidationError",
    "NetworkError",
    "PerplexityAPI",
    "PerplexityMCPError",
    "QueryValidationError",
    "RequestTimeoutError",
    "RequestValidationError",
    "SSEStreamAssembler",
    "SchemaError",
    "SchemaErrorKind",
    "SearchEngine",
    "SearchResponse",
    "UpstreamError",
    "assemble_stream",
    "build_filter_set",
    "build_headers",
    "build_search_request",
    "format_search_results",
    "strip_thinking_tokens",
    "validate_completion",
    "validate_filters",
    "validate_messages",
    "validate_search",
]
