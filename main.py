"""Application entry point for the Perplexity MCP server.

Updates:
  v0.3.0 - 2026-10-16 - Serve stateless streamable HTTP with --transport http.
  v0.2.0 - 2026-10-12 - Exit with status 2 when the API key is missing at startup.
  v0.1.0 - 2026-10-10 - Wire CLI parsing, logging, settings, and the FastMCP server.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from cli.parser import parse_args
from cli.runtime import configure_http_logging, setup_logging
from cli.settings_summary import print_settings_summary
from config import ConfigError, EnvironmentSettingsProvider, load_settings, require_api_key
from server import build_server

TRANSPORTS: dict[str, str] = {
    "stdio": "stdio",
    "http": "streamable-http",
}


def _settings_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level
    return overrides


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, logging, and the MCP transport."""
    args = parse_args(argv)
    setup_logging(args.logging_config, args.log_level or "INFO")

    logger = logging.getLogger("perplexity_mcp.main")
    overrides = _settings_overrides(args)
    try:
        settings = load_settings(**overrides)
    except ConfigError as exc:
        logger.error("Failed to load settings: %s", exc)
        return 2

    if args.print_settings:
        print_settings_summary(settings)
        return 0

    try:
        require_api_key(settings)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    if not args.log_level:
        logging.getLogger().setLevel(settings.log_level)
    configure_http_logging(settings.log_level == "DEBUG")

    server = build_server(
        EnvironmentSettingsProvider(**overrides),
        host=settings.host,
        port=settings.port,
    )
    transport = TRANSPORTS[args.transport]
    if transport == "stdio":
        logger.info("Perplexity MCP server running on stdio")
    else:
        logger.info(
            "Perplexity MCP server listening on http://%s:%s/mcp",
            settings.host,
            settings.port,
        )
    server.run(transport=transport)  # type: ignore[arg-type]
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
