"""Tests for configuration loading and validation logic.

Updates:
  v0.3.0 - 2026-10-15 - Cover settings providers.
  v0.2.0 - 2026-10-12 - Cover proxy alias priority and .env loading.
  v0.1.0 - 2026-10-06 - Cover JSON/env precedence and validation errors.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pytest import LogCaptureFixture, MonkeyPatch

from config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    ConfigError,
    EnvironmentSettingsProvider,
    PerplexitySettings,
    SettingsProvider,
    StaticSettingsProvider,
    load_settings,
    require_api_key,
)


def test_defaults_apply_without_configuration() -> None:
    """Use the public endpoint and default timeout when nothing is configured."""
    settings = load_settings()

    assert settings.api_key is None
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout_ms == DEFAULT_TIMEOUT_MS
    assert settings.proxy_url is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8080
    assert settings.log_level == "INFO"


def test_environment_variables_populate_settings(monkeypatch: MonkeyPatch) -> None:
    """Read the PERPLEXITY_* variables."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "  pplx-env  ")
    monkeypatch.setenv("PERPLEXITY_BASE_URL", "https://gateway.example/api///")
    monkeypatch.setenv("PERPLEXITY_TIMEOUT_MS", "45000")
    monkeypatch.setenv("PERPLEXITY_SERVICE_ORIGIN", "ci-agent")
    monkeypatch.setenv("PERPLEXITY_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.api_key == "pplx-env"
    assert settings.base_url == "https://gateway.example/api"
    assert settings.timeout_ms == 45000
    assert settings.service_origin == "ci-agent"
    assert settings.log_level == "DEBUG"


def test_api_key_is_hidden_from_repr(monkeypatch: MonkeyPatch) -> None:
    """Keep the credential out of the settings repr."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-secret-value")

    assert "pplx-secret-value" not in repr(load_settings())


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        (
            {
                "PERPLEXITY_PROXY": "http://search-proxy:1",
                "HTTPS_PROXY": "http://https-proxy:2",
                "HTTP_PROXY": "http://http-proxy:3",
            },
            "http://search-proxy:1",
        ),
        ({"HTTPS_PROXY": "http://https-proxy:2", "HTTP_PROXY": "http://http-proxy:3"},
         "http://https-proxy:2"),
        ({"HTTP_PROXY": "http://http-proxy:3"}, "http://http-proxy:3"),
        ({"PERPLEXITY_PROXY": "", "HTTP_PROXY": "http://http-proxy:3"}, "http://http-proxy:3"),
        ({}, None),
    ],
)
def test_proxy_resolution_order(
    monkeypatch: MonkeyPatch,
    env: dict[str, str],
    expected: str | None,
) -> None:
    """Prefer PERPLEXITY_PROXY, then HTTPS_PROXY, then HTTP_PROXY; skip empty values."""
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    assert load_settings().proxy_url == expected


def test_bind_address_aliases(monkeypatch: MonkeyPatch) -> None:
    """Accept the generic BIND_ADDRESS and PORT variables."""
    monkeypatch.setenv("BIND_ADDRESS", "0.0.0.0")
    monkeypatch.setenv("PORT", "9000")

    settings = load_settings()

    assert settings.host == "0.0.0.0"
    assert settings.port == 9000


@pytest.mark.parametrize("value", ["0", "-5", "soon"])
def test_invalid_timeout_raises_config_error(monkeypatch: MonkeyPatch, value: str) -> None:
    """Reject timeouts that are not positive integers."""
    monkeypatch.setenv("PERPLEXITY_TIMEOUT_MS", value)

    with pytest.raises(ConfigError, match="timeout_ms"):
        load_settings()


def test_invalid_log_level_raises_config_error(monkeypatch: MonkeyPatch) -> None:
    """Reject unknown log levels."""
    monkeypatch.setenv("PERPLEXITY_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError, match="log_level"):
        load_settings()


def test_keyword_overrides_win_over_environment(monkeypatch: MonkeyPatch) -> None:
    """Apply explicit overrides ahead of environment variables."""
    monkeypatch.setenv("PERPLEXITY_PORT", "9000")

    assert load_settings(port=9100).port == 9100


def test_json_config_supplies_non_secret_values(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
    caplog: LogCaptureFixture,
) -> None:
    """Load non-secret values from JSON and ignore credentials with a warning."""
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps({"api_key": "from-json", "timeout_ms": 1234, "service_origin": "json-origin"}),
        encoding="utf-8",
    )
    monkeypatch.setenv("PERPLEXITY_MCP_CONFIG_JSON", str(config_path))

    with caplog.at_level(logging.WARNING, logger="perplexity_mcp.settings"):
        settings = load_settings()

    assert settings.api_key is None
    assert settings.timeout_ms == 1234
    assert settings.service_origin == "json-origin"
    assert "Ignoring secret key(s) api_key" in caplog.text


def test_environment_overrides_json_config(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Give environment variables precedence over JSON values."""
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"timeout_ms": 1234}), encoding="utf-8")
    monkeypatch.setenv("PERPLEXITY_MCP_CONFIG_JSON", str(config_path))
    monkeypatch.setenv("PERPLEXITY_TIMEOUT_MS", "5678")

    assert load_settings().timeout_ms == 5678


def test_default_config_json_location_is_used(tmp_path: Path) -> None:
    """Read config/config.json relative to the working directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"port": 8181}), encoding="utf-8")

    assert load_settings().port == 8181


def test_missing_explicit_config_file_raises(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Fail loudly when PERPLEXITY_MCP_CONFIG_JSON points nowhere."""
    monkeypatch.setenv("PERPLEXITY_MCP_CONFIG_JSON", str(tmp_path / "missing.json"))

    with pytest.raises(ConfigError, match="Configuration file not found"):
        load_settings()


@pytest.mark.parametrize("contents", ["{not json", "[1, 2]"])
def test_malformed_config_file_raises(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
    contents: str,
) -> None:
    """Reject config files that are not a JSON object."""
    config_path = tmp_path / "settings.json"
    config_path.write_text(contents, encoding="utf-8")
    monkeypatch.setenv("PERPLEXITY_MCP_CONFIG_JSON", str(config_path))

    with pytest.raises(ConfigError):
        load_settings()


def test_dotenv_file_supplies_values(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Read .env entries without overriding real environment variables."""
    env_file = tmp_path / "perplexity.env"
    env_file.write_text(
        "PERPLEXITY_API_KEY=from-dotenv\nPERPLEXITY_TIMEOUT_MS=7000\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PERPLEXITY_MCP_ENV_FILE", str(env_file))
    monkeypatch.setenv("PERPLEXITY_TIMEOUT_MS", "8000")

    settings = load_settings()

    assert settings.api_key == "from-dotenv"
    assert settings.timeout_ms == 8000


def test_require_api_key(monkeypatch: MonkeyPatch) -> None:
    """Return the key when present and raise ConfigError otherwise."""
    with pytest.raises(ConfigError, match="PERPLEXITY_API_KEY environment variable is required"):
        require_api_key(load_settings())

    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-ok")
    assert require_api_key(load_settings()) == "pplx-ok"


def test_environment_provider_reloads_each_call(monkeypatch: MonkeyPatch) -> None:
    """Return settings reflecting the environment at call time."""
    provider = EnvironmentSettingsProvider(port=9200)
    monkeypatch.setenv("PERPLEXITY_BASE_URL", "https://one.example")
    first = provider.current()
    monkeypatch.setenv("PERPLEXITY_BASE_URL", "https://two.example")
    second = provider.current()

    assert (first.base_url, second.base_url) == ("https://one.example", "https://two.example")
    assert first.port == second.port == 9200
    assert isinstance(provider, SettingsProvider)


def test_static_provider_returns_same_instance() -> None:
    """Serve the exact settings object it was given."""
    settings = PerplexitySettings(api_key="pplx-static")
    provider = StaticSettingsProvider(settings)

    assert provider.current() is settings
    assert isinstance(provider, SettingsProvider)
