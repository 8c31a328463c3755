"""Pytest configuration for shared test fixtures and environment hooks.

Updates:
  v0.2.0 - 2026-10-15 - Share a MockTransport-backed dispatcher factory across suites.
  v0.1.0 - 2026-10-06 - Isolate tests from host Perplexity and proxy environment variables.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx
import pytest

from core.dispatch import HttpDispatcher

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]

_ISOLATED_ENV_VARS = (
    "PERPLEXITY_API_KEY",
    "PERPLEXITY_BASE_URL",
    "PERPLEXITY_TIMEOUT_MS",
    "PERPLEXITY_PROXY",
    "PERPLEXITY_SERVICE_ORIGIN",
    "PERPLEXITY_BIND_ADDRESS",
    "PERPLEXITY_PORT",
    "PERPLEXITY_LOG_LEVEL",
    "PERPLEXITY_MCP_CONFIG_JSON",
    "HTTPS_PROXY",
    "HTTP_PROXY",
    "https_proxy",
    "http_proxy",
    "BIND_ADDRESS",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test without host configuration, .env files, or config/config.json."""
    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PERPLEXITY_MCP_ENV_FILE", "")
    monkeypatch.chdir(tmp_path)


class RecordingDispatcherFactory:
    """Build dispatchers whose clients route through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.client_args: list[tuple[str | None, float]] = []
        self.clients: list[httpx.AsyncClient] = []

    def __call__(self, handler: Handler) -> HttpDispatcher:
        async def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        def client_factory(proxy: str | None, timeout: float) -> httpx.AsyncClient:
            self.client_args.append((proxy, timeout))
            client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
            self.clients.append(client)
            return client

        return HttpDispatcher(client_factory=client_factory)


@pytest.fixture()
def mock_dispatcher() -> RecordingDispatcherFactory:
    """Return a factory turning a request handler into a recording dispatcher."""
    return RecordingDispatcherFactory()
