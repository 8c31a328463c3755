"""Printable summaries for Perplexity MCP server configuration.

Updates:
  v0.1.1 - 2026-10-16 - Show the HTTP bind address in summaries.
  v0.1.0 - 2026-10-10 - Extract CLI settings summary rendering.
"""

from __future__ import annotations

from config import PerplexitySettings

from .utils import mask_secret


def format_settings_summary(settings: PerplexitySettings) -> list[str]:
    """Return the summary lines describing *settings*."""
    proxy_desc = settings.proxy_url or "not set (direct connection)"
    origin_desc = settings.service_origin or "not set"
    return [
        "Perplexity MCP server configuration",
        "===================================",
        f"API key: {mask_secret(settings.api_key)}",
        f"Base URL: {settings.base_url}",
        f"Timeout: {settings.timeout_ms} ms",
        f"Proxy: {proxy_desc}",
        f"X-Service origin: {origin_desc}",
        f"HTTP bind address: {settings.host}:{settings.port}",
        f"Log level: {settings.log_level}",
    ]


def print_settings_summary(settings: PerplexitySettings) -> None:
    """Emit a readable summary of the resolved configuration."""
    print("\n".join(format_settings_summary(settings)))


__all__ = ["format_settings_summary", "print_settings_summary"]
