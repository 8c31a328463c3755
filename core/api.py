"""Shared request plumbing for the Perplexity REST endpoints.

Updates:
  v0.1.1 - 2026-10-15 - Read settings through the injected provider on every call.
  v0.1.0 - 2026-10-09 - Extract header building and dispatch shared by ask and search.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, TypeVar

from config.settings import require_api_key

from .dispatch import HttpDispatcher

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import httpx

    from config.settings import SettingsProvider

CHAT_COMPLETIONS_PATH = "/chat/completions"
SEARCH_PATH = "/search"

logger = logging.getLogger("perplexity_mcp.api")

T = TypeVar("T")


def build_headers(api_key: str, service_origin: str | None = None) -> dict[str, str]:
    """Return the JSON and bearer headers, plus ``X-Service`` when an origin is set."""
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    if service_origin:
        headers["X-Service"] = service_origin
    return headers


class PerplexityAPI:
    """POST JSON bodies to the configured Perplexity base URL."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        dispatcher: HttpDispatcher | None = None,
    ) -> None:
        """Store the configuration capability and the outbound dispatcher."""
        self._settings_provider = settings_provider
        self._dispatcher = dispatcher or HttpDispatcher()

    async def post(
        self,
        path: str,
        body: dict[str, Any],
        *,
        consume: Callable[[httpx.Response], Awaitable[T]],
    ) -> T:
        """Send *body* to *path* using settings read fresh for this call.

        Raises:
          ConfigError: When no API key is configured.
          DispatchError: When the upstream call fails.
        """
        settings = self._settings_provider.current()
        api_key = require_api_key(settings)
        url = f"{settings.base_url}{path}"
        started = time.perf_counter()
        logger.info("POST %s (model=%s)", path, body.get("model", "-"))
        result = await self._dispatcher.dispatch(
            url,
            consume=consume,
            headers=build_headers(api_key, settings.service_origin),
            json_body=body,
            timeout_ms=settings.timeout_ms,
            proxy=settings.proxy_url,
        )
        logger.info("POST %s completed in %.0fms", path, (time.perf_counter() - started) * 1000)
        return result


__all__ = [
    "CHAT_COMPLETIONS_PATH",
    "SEARCH_PATH",
    "PerplexityAPI",
    "build_headers",
]
