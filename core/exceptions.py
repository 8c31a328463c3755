"""Common exception classes for core package.

This module centralises the error taxonomy used by the request/response layer
so the MCP tool surface can catch a single base class while still telling
validation, transport, and payload-shape failures apart.

All exceptions ultimately inherit from :class:`PerplexityMCPError`. Each
subclass renders a human-readable message that embeds its classification and
the relevant context (field name, status code, timeout value).

Updates:
  v0.3.0 - 2026-10-14 - Reject non-string citation entries with a dedicated schema kind.
  v0.2.0 - 2026-10-09 - Split dispatch failures into network, timeout, and upstream errors.
  v0.1.0 - 2026-10-06 - Created module with validation and schema error hierarchy.
"""

from __future__ import annotations

from enum import StrEnum


class PerplexityMCPError(Exception):
    """Base exception for Perplexity MCP server failures."""


# ---------------------------------------------------------------------------
# Validation errors (raised before any network request is constructed)
# ---------------------------------------------------------------------------


class RequestValidationError(PerplexityMCPError):
    """Raised when tool arguments fail validation before dispatch."""


class FilterErrorKind(StrEnum):
    """Classification of search filter violations."""

    BAD_DATE_FORMAT = "BadDateFormat"
    CONFLICTING_FILTERS = "ConflictingFilters"
    TOO_MANY_DOMAINS = "TooManyDomains"
    MIXED_DOMAIN_MODE = "MixedDomainMode"


class FilterError(RequestValidationError):
    """Raised when a date, recency, or domain filter combination is invalid."""

    def __init__(self, kind: FilterErrorKind, message: str, *, field: str | None = None) -> None:
        self.kind = kind
        self.field = field
        super().__init__(f"{kind}: {message}")


class MessageValidationError(RequestValidationError):
    """Raised when the conversation message array is malformed."""


class QueryValidationError(RequestValidationError):
    """Raised when search query arguments are out of range or malformed."""


# ---------------------------------------------------------------------------
# Dispatch errors (outbound HTTP)
# ---------------------------------------------------------------------------


class DispatchError(PerplexityMCPError):
    """Base class for failures while calling the upstream API."""


class NetworkError(DispatchError):
    """Raised when the connection to the upstream API fails."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"NetworkError: network error while calling Perplexity API: {cause!r}")


class RequestTimeoutError(DispatchError):
    """Raised when the upstream API does not answer within the configured deadline."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timeout: Perplexity API did not respond within {timeout_ms}ms. "
            "Consider increasing PERPLEXITY_TIMEOUT_MS."
        )


class UpstreamError(DispatchError):
    """Raised when the upstream API answers with a non-2xx status."""

    def __init__(self, status: int, status_text: str, body_text: str) -> None:
        self.status = status
        self.status_text = status_text
        self.body_text = body_text
        super().__init__(
            f"UpstreamError: Perplexity API error: {status} {status_text}\n{body_text}"
        )


# ---------------------------------------------------------------------------
# Schema errors (upstream payload shape)
# ---------------------------------------------------------------------------


class SchemaErrorKind(StrEnum):
    """Classification of upstream payload shape violations."""

    MISSING_CONTENT = "MissingContent"
    EMPTY_CHOICES = "EmptyChoices"
    INVALID_PAYLOAD = "InvalidPayload"
    INVALID_CITATIONS = "InvalidCitations"


class SchemaError(PerplexityMCPError):
    """Raised when an upstream payload does not match the expected shape."""

    def __init__(self, kind: SchemaErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(f"{kind}: Invalid API response: {message}")


__all__ = [
    "DispatchError",
    "FilterError",
    "FilterErrorKind",
    "MessageValidationError",
    "NetworkError",
    "PerplexityMCPError",
    "QueryValidationError",
    "RequestTimeoutError",
    "RequestValidationError",
    "SchemaError",
    "SchemaErrorKind",
    "UpstreamError",
]
