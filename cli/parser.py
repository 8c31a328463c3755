"""Argument parser for the Perplexity MCP server CLI.

Updates:
  v0.2.0 - 2026-10-16 - Add --host/--port overrides for the streamable HTTP transport.
  v0.1.0 - 2026-10-10 - Introduce --transport, --logging-config, and --print-settings flags.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

TRANSPORT_CHOICES: tuple[str, ...] = ("stdio", "http")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser used by :func:`parse_args`."""
    parser = argparse.ArgumentParser(
        prog="perplexity-mcp",
        description="Perplexity MCP server exposing ask, research, reason, and search tools.",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORT_CHOICES,
        default="stdio",
        help="Transport used to talk to MCP clients (default: stdio).",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind address for the HTTP transport (overrides PERPLEXITY_BIND_ADDRESS).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP transport (overrides PERPLEXITY_PORT).",
    )
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default=None,
        help="Root log level when no logging configuration file is used.",
    )
    parser.add_argument(
        "--print-settings",
        action="store_true",
        help="Print resolved settings and exit",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments for the server launcher."""
    return build_parser().parse_args(argv)


__all__ = ["TRANSPORT_CHOICES", "build_parser", "parse_args"]
