"""Utility script to load and print Perplexity MCP settings for diagnostics.

Updates:
  v0.1.1 - 2026-10-16 - Report a missing API key as a validation failure.
  v0.1.0 - 2026-10-10 - Add validation helper for environment/config debugging.
"""

from __future__ import annotations

import traceback

from cli.settings_summary import print_settings_summary
from config.settings import ConfigError, load_settings, require_api_key


def main() -> int:
    """Load settings and report validation outcomes."""
    try:
        settings = load_settings()
    except ConfigError:
        traceback.print_exc()
        return 2
    print("Settings loaded successfully.")
    print_settings_summary(settings)
    try:
        require_api_key(settings)
    except ConfigError as exc:
        print(f"Validation failed: {exc}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
