"""Proxy-aware outbound HTTP dispatch with a per-call deadline.

Updates:
  v0.2.0 - 2026-10-12 - Cover body reads with the same deadline as the request.
  v0.1.1 - 2026-10-09 - Accept the outbound proxy per call instead of caching a client.
  v0.1.0 - 2026-10-07 - Introduce httpx-backed dispatcher and error classification.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from .exceptions import NetworkError, RequestTimeoutError, UpstreamError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

DEFAULT_TIMEOUT_MS = 300_000
UNREADABLE_ERROR_BODY = "Unable to parse error response"

logger = logging.getLogger("perplexity_mcp.dispatch")

T = TypeVar("T")


def _default_client_factory(proxy: str | None, timeout_seconds: float) -> httpx.AsyncClient:
    # trust_env is off: the proxy passed in is the only one used.
    return httpx.AsyncClient(proxy=proxy, timeout=timeout_seconds, trust_env=False)


async def _read_error_body(response: httpx.Response) -> str:
    try:
        raw = await response.aread()
    except httpx.HTTPError:
        logger.debug("Unable to read upstream error body", exc_info=True)
        return UNREADABLE_ERROR_BODY
    return raw.decode("utf-8", errors="replace")


class HttpDispatcher:
    """Send one request per call, each on its own client and deadline."""

    def __init__(
        self,
        *,
        client_factory: Callable[[str | None, float], httpx.AsyncClient] | None = None,
    ) -> None:
        """Initialise the dispatcher with an optional client factory.

        The factory receives the proxy URL (or ``None``) and the timeout in
        seconds and must return a fresh client; the dispatcher closes it.
        """
        self._client_factory = client_factory or _default_client_factory

    async def dispatch(
        self,
        url: str,
        *,
        consume: Callable[[httpx.Response], Awaitable[T]],
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        proxy: str | None = None,
    ) -> T:
        """Send the request and hand the streamed response to *consume*.

        The deadline spans connecting, receiving headers, and every body read
        performed by *consume*; on expiry the in-flight request is cancelled.

        Raises:
          RequestTimeoutError: When the deadline elapses.
          NetworkError: On connection-level failures.
          UpstreamError: When the response status is not 2xx.
        """
        timeout_seconds = timeout_ms / 1000
        if proxy:
            logger.debug("Routing %s %s through configured proxy", method, url)
        client = self._client_factory(proxy, timeout_seconds)
        started = time.perf_counter()
        try:
            async with asyncio.timeout(timeout_seconds):
                async with client.stream(method, url, headers=headers, json=json_body) as response:
                    if not response.is_success:
                        body_text = await _read_error_body(response)
                        logger.warning(
                            "Upstream returned %s %s for %s",
                            response.status_code,
                            response.reason_phrase,
                            url,
                        )
                        raise UpstreamError(response.status_code, response.reason_phrase, body_text)
                    return await consume(response)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Request to %s timed out after %dms", url, timeout_ms)
            raise RequestTimeoutError(timeout_ms) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(exc) from exc
        finally:
            await client.aclose()
            logger.debug(
                "%s %s finished in %.0fms",
                method,
                url,
                (time.perf_counter() - started) * 1000,
            )


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "UNREADABLE_ERROR_BODY",
    "HttpDispatcher",
]
