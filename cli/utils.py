"""Shared CLI utility functions for the Perplexity MCP server.

Updates:
  v0.1.0 - 2026-10-10 - Extract secret masking helper.
"""

from __future__ import annotations


def mask_secret(value: str | None) -> str:
    """Return an obfuscated representation of secret configuration values."""
    if not value:
        return "not set"
    secret = value.strip()
    if len(secret) <= 6:
        return "set (****)"
    prefix = secret[:4]
    suffix = secret[-4:]
    return f"set ({prefix}...{suffix})"


__all__ = ["mask_secret"]
