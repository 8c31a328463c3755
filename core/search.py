"""Search engine backing the perplexity_search tool.

Updates:
  v0.2.0 - 2026-10-13 - Accept batches of up to five queries per call.
  v0.1.1 - 2026-10-11 - Render last-updated dates alongside publication dates.
  v0.1.0 - 2026-10-09 - Introduce SearchEngine and result formatting.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

from models.search import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_MAX_TOKENS_PER_PAGE,
    MAX_BATCH_QUERIES,
    MAX_MAX_RESULTS,
    MAX_TOKENS_PER_PAGE,
    MIN_MAX_RESULTS,
    MIN_TOKENS_PER_PAGE,
    SearchRequest,
)

from .api import SEARCH_PATH, PerplexityAPI
from .exceptions import QueryValidationError, SchemaError, SchemaErrorKind
from .schemas import validate_search

if TYPE_CHECKING:
    import httpx

    from config.settings import SettingsProvider

    from .dispatch import HttpDispatcher
    from .schemas import SearchResponse

NO_RESULTS_MESSAGE = "No search results found."

_COUNTRY_PATTERN = re.compile(r"^[A-Za-z]{2}$")

logger = logging.getLogger("perplexity_mcp.search")


def _normalise_query(query: object) -> str | tuple[str, ...]:
    if isinstance(query, str):
        if not query.strip():
            raise QueryValidationError("query must be a non-empty string")
        return query
    if not isinstance(query, Sequence):
        raise QueryValidationError("query must be a string or an array of strings")
    queries = list(query)
    if not queries:
        raise QueryValidationError("query array must contain at least one query")
    if len(queries) > MAX_BATCH_QUERIES:
        raise QueryValidationError(
            f"Maximum of {MAX_BATCH_QUERIES} queries allowed per search request "
            f"(got {len(queries)})"
        )
    if not all(isinstance(item, str) and item.strip() for item in queries):
        raise QueryValidationError("all query array elements must be non-empty strings")
    return tuple(queries)


def build_search_request(
    query: str | Sequence[str],
    *,
    max_results: int = DEFAULT_MAX_RESULTS,
    max_tokens_per_page: int = DEFAULT_MAX_TOKENS_PER_PAGE,
    country: str | None = None,
) -> SearchRequest:
    """Validate search arguments and return a :class:`SearchRequest`.

    Raises:
      QueryValidationError: When any argument is out of range or malformed.
    """
    normalised = _normalise_query(query)
    if not MIN_MAX_RESULTS <= max_results <= MAX_MAX_RESULTS:
        raise QueryValidationError(
            f"max_results must be between {MIN_MAX_RESULTS} and {MAX_MAX_RESULTS}"
        )
    if not MIN_TOKENS_PER_PAGE <= max_tokens_per_page <= MAX_TOKENS_PER_PAGE:
        raise QueryValidationError(
            f"max_tokens_per_page must be between {MIN_TOKENS_PER_PAGE} and {MAX_TOKENS_PER_PAGE}"
        )
    country_code: str | None = None
    if country:
        if not _COUNTRY_PATTERN.fullmatch(country.strip()):
            raise QueryValidationError(
                f"country must be an ISO 3166-1 alpha-2 code (e.g., 'US'), got {country!r}"
            )
        country_code = country.strip().upper()
    return SearchRequest(
        query=normalised,
        max_results=max_results,
        max_tokens_per_page=max_tokens_per_page,
        country=country_code,
    )


def format_search_results(response: SearchResponse) -> str:
    """Render ranked results as numbered, human-readable text."""
    if not response.results:
        return NO_RESULTS_MESSAGE
    parts = [f"Found {len(response.results)} search results:\n\n"]
    for index, result in enumerate(response.results, start=1):
        parts.append(f"{index}. **{result.title}**\n")
        parts.append(f"   URL: {result.url}\n")
        if result.snippet:
            parts.append(f"   {result.snippet}\n")
        if result.date:
            parts.append(f"   Date: {result.date}\n")
        if result.last_updated:
            parts.append(f"   Last Updated: {result.last_updated}\n")
        parts.append("\n")
    return "".join(parts)


async def _consume_search(response: httpx.Response) -> SearchResponse:
    raw = await response.aread()
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise SchemaError(
            SchemaErrorKind.INVALID_PAYLOAD,
            f"failed to parse JSON response from Perplexity Search API: {exc}",
        ) from exc
    return validate_search(payload)


class SearchEngine:
    """Run one search call end to end."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        *,
        dispatcher: HttpDispatcher | None = None,
    ) -> None:
        self._api = PerplexityAPI(settings_provider, dispatcher)

    async def fetch(self, request: SearchRequest) -> SearchResponse:
        """Dispatch a validated request and return the ranked results."""
        response = await self._api.post(SEARCH_PATH, request.to_payload(), consume=_consume_search)
        logger.info(
            "Search returned %d result(s) for %d query(ies)",
            len(response.results),
            request.query_count,
        )
        return response

    async def search(
        self,
        query: str | Sequence[str],
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
        max_tokens_per_page: int = DEFAULT_MAX_TOKENS_PER_PAGE,
        country: str | None = None,
    ) -> str:
        """Validate, dispatch, and format a search; validation runs before dispatch."""
        request = build_search_request(
            query,
            max_results=max_results,
            max_tokens_per_page=max_tokens_per_page,
            country=country,
        )
        return format_search_results(await self.fetch(request))


__all__ = [
    "NO_RESULTS_MESSAGE",
    "SearchEngine",
    "build_search_request",
    "format_search_results",
]
