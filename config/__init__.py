"""Configuration helpers for the Perplexity MCP server.

Updates: v0.2.0 - 2026-10-15 - Expose settings providers for per-call configuration reads.
Updates: v0.1.0 - 2026-10-06 - Expose settings loader and configuration error types.
"""

from .settings import (
    DEFAULT_BASE_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_MS,
    ConfigError,
    EnvironmentSettingsProvider,
    PerplexitySettings,
    SettingsProvider,
    StaticSettingsProvider,
    load_settings,
    require_api_key,
)

__all__ = [
    "ConfigError",
    "DEFAULT_BASE_URL",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_MS",
    "EnvironmentSettingsProvider",
    "PerplexitySettings",
    "SettingsProvider",
    "StaticSettingsProvider",
    "load_settings",
    "require_api_key",
]
