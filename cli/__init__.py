"""Command-line helpers for the Perplexity MCP server launcher.

Updates: v0.1.0 - 2026-10-10 - Package scaffold for parser, runtime, and summary helpers.
"""
