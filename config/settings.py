"""Settings management utilities for Perplexity MCP server configuration.

Updates:
  v0.3.0 - 2026-10-15 - Add settings providers so the core re-reads configuration per call.
  v0.2.1 - 2026-10-12 - Resolve the outbound proxy from PERPLEXITY_PROXY/HTTPS_PROXY/HTTP_PROXY.
  v0.2.0 - 2026-10-09 - Load non-secret values from an optional JSON configuration file.
  v0.1.0 - 2026-10-06 - Introduce PerplexitySettings with env and .env support.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, cast, runtime_checkable

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_DOTENV_FALLBACK_PATH = ".env"

DEFAULT_BASE_URL = "https://api.perplexity.ai"
DEFAULT_TIMEOUT_MS = 300_000
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"

_LOG_LEVEL_CHOICES = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Field name -> environment variables, highest priority first.
_ENV_ALIASES: dict[str, list[str]] = {
    "api_key": ["PERPLEXITY_API_KEY"],
    "base_url": ["PERPLEXITY_BASE_URL"],
    "timeout_ms": ["PERPLEXITY_TIMEOUT_MS"],
    "proxy_url": ["PERPLEXITY_PROXY", "HTTPS_PROXY", "HTTP_PROXY"],
    "service_origin": ["PERPLEXITY_SERVICE_ORIGIN"],
    "host": ["PERPLEXITY_BIND_ADDRESS", "BIND_ADDRESS"],
    "port": ["PERPLEXITY_PORT", "PORT"],
    "log_level": ["PERPLEXITY_LOG_LEVEL", "LOG_LEVEL"],
}

_JSON_ALLOWED_KEYS: tuple[str, ...] = (
    "base_url",
    "timeout_ms",
    "service_origin",
    "host",
    "port",
    "log_level",
)
_JSON_SECRET_KEYS: frozenset[str] = frozenset({"api_key", "PERPLEXITY_API_KEY"})


class ConfigError(Exception):
    """Raised when server configuration cannot be loaded, validated, or is incomplete."""


def _read_dotenv_values() -> dict[str, str]:
    """Load ``.env`` entries into a mapping without mutating ``os.environ``."""
    env_file_override = os.getenv("PERPLEXITY_MCP_ENV_FILE")
    if env_file_override is not None:
        candidate = env_file_override.strip()
        if not candidate:
            return {}
        path = Path(candidate).expanduser()
    else:
        path = Path(_DOTENV_FALLBACK_PATH).expanduser()
    if not path.is_file():
        return {}
    raw_values = dotenv_values(str(path))
    return {str(key): str(value) for key, value in raw_values.items() if value is not None}


class PerplexitySettings(BaseSettings):
    """Server configuration sourced from keyword overrides, JSON, and the environment."""

    api_key: str | None = Field(
        default=None,
        description="Perplexity API credential sent as a bearer token.",
        repr=False,
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the Perplexity API (no trailing slash).",
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        description="Deadline for one upstream call, including streamed body reads.",
    )
    proxy_url: str | None = Field(
        default=None,
        description="Outbound proxy URL; PERPLEXITY_PROXY wins over HTTPS_PROXY and HTTP_PROXY.",
    )
    service_origin: str | None = Field(
        default=None,
        description="Optional value for the X-Service origin header.",
    )
    host: str = Field(default=DEFAULT_HOST, description="Bind address for the HTTP transport.")
    port: int = Field(default=DEFAULT_PORT, description="Port for the HTTP transport.")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Root logging level.")

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": "PERPLEXITY_",
            "case_sensitive": False,
            "populate_by_name": True,
        },
    )

    @field_validator("api_key", "proxy_url", "service_origin", mode="before")
    def _strip_strings(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @field_validator("base_url", mode="before")
    def _normalise_base_url(cls, value: str | None) -> str:
        """Fall back to the public endpoint and drop trailing slashes."""
        if value is None:
            return DEFAULT_BASE_URL
        text = str(value).strip().rstrip("/")
        return text or DEFAULT_BASE_URL

    @field_validator("timeout_ms")
    def _validate_timeout(cls, value: int) -> int:
        """Ensure the request timeout is a positive integer."""
        if value <= 0:
            raise ValueError("timeout_ms must be greater than zero")
        return value

    @field_validator("port")
    def _validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("port must be between 1 and 65535")
        return value

    @field_validator("log_level", mode="before")
    def _normalise_log_level(cls, value: str | None) -> str:
        if value is None:
            return DEFAULT_LOG_LEVEL
        level = str(value).strip().upper()
        if not level:
            return DEFAULT_LOG_LEVEL
        if level not in _LOG_LEVEL_CHOICES:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(_LOG_LEVEL_CHOICES))}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(timeout_ms=1000)).
            2. Environment variables, then ``.env`` entries, via their aliases.
            3. JSON configuration file (non-secret values only).
            4. File secrets.
        """

        def env_with_aliases(_: BaseSettings | None = None) -> dict[str, Any]:
            data: dict[str, Any] = {}
            dotenv_data = _read_dotenv_values()

            def _lookup(candidate: str) -> str | None:
                value = os.getenv(candidate)
                if value is None:
                    value = dotenv_data.get(candidate)
                if value is None:
                    return None
                stripped_value = str(value).strip()
                return stripped_value or None

            for field, keys in _ENV_ALIASES.items():
                for key in keys:
                    value = _lookup(key)
                    if value is not None:
                        data[field] = value
                        break
            return data

        return (
            init_settings,
            cast("PydanticBaseSettingsSource", env_with_aliases),
            cls._json_config_settings_source(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv("PERPLEXITY_MCP_CONFIG_JSON")
            if explicit_path:
                path = Path(explicit_path).expanduser()
                if not path.exists():
                    raise ConfigError(f"Configuration file not found: {path}")
            else:
                path = (Path("config") / "config.json").expanduser()
                if not path.exists():
                    return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise ConfigError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, dict):
                raise ConfigError(f"Configuration file {path} must contain a JSON object")
            data_dict: dict[str, Any] = {
                str(key): value for key, value in cast("Mapping[object, Any]", data).items()
            }
            removed_secrets = sorted(key for key in _JSON_SECRET_KEYS if key in data_dict)
            if removed_secrets:
                logger.warning(
                    "Ignoring secret key(s) %s in configuration file %s; "
                    "set credentials via environment variables instead.",
                    ", ".join(removed_secrets),
                    path,
                )
            return {key: data_dict[key] for key in _JSON_ALLOWED_KEYS if key in data_dict}

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> PerplexitySettings:
    """Return validated settings, raising ConfigError on failure."""
    try:
        return PerplexitySettings(**overrides)
    except ConfigError:
        raise
    except ValidationError as exc:
        raise ConfigError(f"Invalid Perplexity MCP configuration: {exc}") from exc


def require_api_key(settings: PerplexitySettings) -> str:
    """Return the configured API key or raise ConfigError when it is missing."""
    if not settings.api_key:
        raise ConfigError("PERPLEXITY_API_KEY environment variable is required")
    return settings.api_key


@runtime_checkable
class SettingsProvider(Protocol):
    """Capability that returns the configuration in effect right now."""

    def current(self) -> PerplexitySettings:
        """Return settings for the call that is about to run."""
        ...


class EnvironmentSettingsProvider:
    """Re-load settings from the environment on every ``current()`` call."""

    def __init__(self, **overrides: Any) -> None:
        """Store keyword overrides applied on every load."""
        self._overrides = overrides

    def current(self) -> PerplexitySettings:
        return load_settings(**self._overrides)


class StaticSettingsProvider:
    """Serve a fixed settings instance (tests and embedded use)."""

    def __init__(self, settings: PerplexitySettings) -> None:
        self._settings = settings

    def current(self) -> PerplexitySettings:
        return self._settings


logger = logging.getLogger("perplexity_mcp.settings")
