"""Lightweight integration checks for main module.

Updates:
  v0.2.0 - 2026-10-16 - Cover the HTTP transport and CLI host/port overrides.
  v0.1.0 - 2026-10-10 - Cover --print-settings and missing credential exit codes.
"""

from __future__ import annotations

import logging
from typing import Any, cast

import pytest

import main
from cli.parser import parse_args
from cli.runtime import configure_http_logging
from cli.settings_summary import format_settings_summary
from cli.utils import mask_secret
from config import load_settings


class _FakeServer:
    def __init__(self) -> None:
        self.transports: list[str] = []

    def run(self, transport: str) -> None:
        self.transports.append(transport)


def _patch_main(monkeypatch: pytest.MonkeyPatch, name: str, value: object) -> None:
    monkeypatch.setattr(cast(Any, main), name, value)


@pytest.fixture()
def fake_server(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Replace server construction and logging setup with recorders."""
    captured: dict[str, Any] = {"server": _FakeServer()}

    def build_server(provider: Any, *, host: str, port: int) -> _FakeServer:
        captured["provider"] = provider
        captured["host"] = host
        captured["port"] = port
        return captured["server"]

    _patch_main(monkeypatch, "build_server", build_server)
    _patch_main(monkeypatch, "setup_logging", lambda *_args, **_kwargs: None)
    return captured


def test_parse_args_defaults() -> None:
    """Default to stdio with no overrides."""
    args = parse_args([])

    assert args.transport == "stdio"
    assert args.host is None
    assert args.port is None
    assert args.log_level is None
    assert args.print_settings is False


def test_parse_args_rejects_unknown_transport() -> None:
    """Exit with a usage error for unsupported transports."""
    with pytest.raises(SystemExit):
        parse_args(["--transport", "websocket"])


def test_missing_api_key_exits_with_status_two(fake_server: dict[str, Any]) -> None:
    """Refuse to serve without a credential."""
    assert main.main([]) == 2
    assert fake_server["server"].transports == []


def test_invalid_settings_exit_with_status_two(
    monkeypatch: pytest.MonkeyPatch,
    fake_server: dict[str, Any],
) -> None:
    """Exit with status 2 when configuration fails validation."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")
    monkeypatch.setenv("PERPLEXITY_TIMEOUT_MS", "-1")

    assert main.main([]) == 2
    assert fake_server["server"].transports == []


def test_stdio_transport_runs_server(
    monkeypatch: pytest.MonkeyPatch,
    fake_server: dict[str, Any],
) -> None:
    """Run the stdio transport when a credential is configured."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    assert main.main([]) == 0
    assert fake_server["server"].transports == ["stdio"]


def test_http_transport_uses_cli_overrides(
    monkeypatch: pytest.MonkeyPatch,
    fake_server: dict[str, Any],
) -> None:
    """Pass CLI host/port to the server and keep them for per-call settings."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")
    monkeypatch.setenv("PERPLEXITY_PORT", "9000")

    exit_code = main.main(["--transport", "http", "--host", "0.0.0.0", "--port", "8123"])

    assert exit_code == 0
    assert fake_server["server"].transports == ["streamable-http"]
    assert (fake_server["host"], fake_server["port"]) == ("0.0.0.0", 8123)
    assert fake_server["provider"].current().port == 8123


def test_print_settings_masks_api_key(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    fake_server: dict[str, Any],
) -> None:
    """Print a masked summary and exit without serving."""
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-1234567890abcd")
    monkeypatch.setenv("HTTPS_PROXY", "http://proxy.internal:3128")

    assert main.main(["--print-settings"]) == 0

    output = capsys.readouterr().out
    assert "API key: set (pplx...abcd)" in output
    assert "pplx-1234567890abcd" not in output
    assert "Proxy: http://proxy.internal:3128" in output
    assert fake_server["server"].transports == []


def test_print_settings_works_without_api_key(
    capsys: pytest.CaptureFixture[str],
    fake_server: dict[str, Any],
) -> None:
    """Allow inspecting configuration before a credential is set."""
    assert main.main(["--print-settings"]) == 0
    assert "API key: not set" in capsys.readouterr().out


def test_format_settings_summary_describes_defaults() -> None:
    """Describe direct connections and the default bind address."""
    lines = format_settings_summary(load_settings())

    assert "Proxy: not set (direct connection)" in lines
    assert "HTTP bind address: 127.0.0.1:8080" in lines
    assert "Timeout: 300000 ms" in lines


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "not set"),
        ("", "not set"),
        ("short", "set (****)"),
        ("pplx-abcdef", "set (pplx...cdef)"),
    ],
)
def test_mask_secret(value: str | None, expected: str) -> None:
    """Hide all but the edges of long secrets."""
    assert mask_secret(value) == expected


def test_configure_http_logging_toggles_levels() -> None:
    """Silence httpx chatter unless explicitly enabled."""
    configure_http_logging(False)
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_http_logging(True)
    assert logging.getLogger("httpx").level == logging.NOTSET
