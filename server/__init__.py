"""MCP tool surface for the Perplexity MCP server.

Updates: v0.1.0 - 2026-10-10 - Package scaffold exposing build_server.
"""

from .tools import HEALTH_PATHS, SERVER_NAME, PerplexityTools, build_server

__all__ = ["HEALTH_PATHS", "SERVER_NAME", "PerplexityTools", "build_server"]
