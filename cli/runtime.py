"""Runtime boot helpers for the Perplexity MCP server CLI.

Updates:
  v0.2.0 - 2026-10-16 - Route log output to stderr so stdio transport frames stay clean.
  v0.1.1 - 2026-10-12 - Add httpx logging toggle helper.
  v0.1.0 - 2026-10-10 - Extract logging configuration helpers.
"""

from __future__ import annotations

import configparser
import logging
import logging.config
import sys
from pathlib import Path

DEFAULT_LOGGING_CONFIG = Path("config/logging.conf")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(logging_conf_path: Path | None, level: str = "INFO") -> None:
    """Configure logging using *logging_conf_path* when available.

    Falls back to ``basicConfig`` on stderr at *level*. Stdout is reserved for
    the MCP stdio transport and must never receive log records.
    """
    path = logging_conf_path or DEFAULT_LOGGING_CONFIG
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            return
        except (configparser.Error, KeyError, ValueError, OSError) as exc:
            print(f"Ignoring invalid logging configuration {path}: {exc}", file=sys.stderr)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def configure_http_logging(enabled: bool) -> None:
    """Enable or disable per-request logs from httpx and httpcore."""
    http_loggers = (
        logging.getLogger("httpx"),
        logging.getLogger("httpcore"),
    )
    for http_logger in http_loggers:
        http_logger.propagate = True
        if enabled:
            http_logger.setLevel(logging.NOTSET)
        else:
            http_logger.setLevel(logging.WARNING)


__all__ = ["DEFAULT_LOGGING_CONFIG", "LOG_FORMAT", "configure_http_logging", "setup_logging"]
