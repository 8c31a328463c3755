"""Search request data model.

Updates: v0.1.0 - 2026-10-07 - Introduce SearchRequest dataclass and range constants.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_MAX_RESULTS = 10
MIN_MAX_RESULTS = 1
MAX_MAX_RESULTS = 20
DEFAULT_MAX_TOKENS_PER_PAGE = 1024
MIN_TOKENS_PER_PAGE = 256
MAX_TOKENS_PER_PAGE = 2048
MAX_BATCH_QUERIES = 5


@dataclass(slots=True, frozen=True)
class SearchRequest:
    """Validated search request; construct through ``core.search.build_search_request``."""

    query: str | tuple[str, ...]
    max_results: int = DEFAULT_MAX_RESULTS
    max_tokens_per_page: int = DEFAULT_MAX_TOKENS_PER_PAGE
    country: str | None = None

    @property
    def query_count(self) -> int:
        return len(self.query) if isinstance(self.query, tuple) else 1

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": list(self.query) if isinstance(self.query, tuple) else self.query,
            "max_results": self.max_results,
            "max_tokens_per_page": self.max_tokens_per_page,
        }
        if self.country:
            payload["country"] = self.country
        return payload


__all__ = [
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_MAX_TOKENS_PER_PAGE",
    "MAX_BATCH_QUERIES",
    "MAX_MAX_RESULTS",
    "MAX_TOKENS_PER_PAGE",
    "MIN_MAX_RESULTS",
    "MIN_TOKENS_PER_PAGE",
    "SearchRequest",
]
