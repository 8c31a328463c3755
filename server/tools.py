"""FastMCP server exposing the Perplexity ask, research, reason, and search tools.

Updates:
  v0.3.0 - 2026-10-20 - Declare output schemas, add /mcp/healthz, log filter failures.
  v0.2.0 - 2026-10-16 - Add /health route for the streamable HTTP transport.
  v0.1.1 - 2026-10-15 - Return plain text content alongside structured content.
  v0.1.0 - 2026-10-10 - Register the four Perplexity tools on FastMCP.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent, ToolAnnotations
from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from config.settings import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    EnvironmentSettingsProvider,
    SettingsProvider,
)
from core.completion import ASK_MODEL, REASON_MODEL, RESEARCH_MODEL, CompletionEngine
from core.dispatch import HttpDispatcher
from core.exceptions import PerplexityMCPError
from core.filters import build_filter_set
from core.search import SearchEngine
from models.completion import ReasoningEffort, SearchContextSize
from models.conversation import ConversationMessage

SERVER_NAME = "perplexity-mcp-server"
# /mcp/healthz sits beside the streamable HTTP endpoint.
HEALTH_PATHS: tuple[str, ...] = ("/health", "/mcp/healthz")
SERVER_INSTRUCTIONS = (
    "Perplexity AI server for web-grounded search, research, and reasoning. "
    "Use perplexity_search for finding URLs, facts, and recent news. "
    "Use perplexity_ask for quick AI-answered questions with citations. Supports recency "
    "filters, date filters, domain restrictions, and search context size control. "
    "Use perplexity_research for in-depth multi-source investigation (slow, 30s+). Supports "
    "reasoning_effort parameter to control depth. "
    "Use perplexity_reason for complex analysis requiring step-by-step logic. "
    "All tools are read-only and access live web data."
)

READ_ONLY_ANNOTATIONS = ToolAnnotations(
    readOnlyHint=True,
    openWorldHint=True,
    idempotentHint=True,
)

logger = logging.getLogger("perplexity_mcp.tools")

MessagesArg = Annotated[
    list[ConversationMessage],
    Field(description="Array of conversation messages"),
]
StripThinkingArg = Annotated[
    bool,
    Field(
        description=(
            "If true, removes <think>...</think> tags and their content from the response "
            "to save context tokens."
        )
    ),
]
RecencyArg = Annotated[
    Literal["hour", "day", "week", "month", "year"] | None,
    Field(
        description=(
            "Filter search results by recency. Cannot be combined with the date filters."
        )
    ),
]
DomainArg = Annotated[
    list[str] | None,
    Field(
        description=(
            "Restrict results to domains or URLs (e.g., ['wikipedia.org']). Use the '-' prefix "
            "for exclusion (e.g., ['-reddit.com']). Up to 20 entries; do not mix modes."
        )
    ),
]
ContextSizeArg = Annotated[
    SearchContextSize | None,
    Field(description="How much web context is retrieved: low (fastest), medium, or high."),
]
EffortArg = Annotated[
    ReasoningEffort | None,
    Field(description="Depth of deep research reasoning; higher is more thorough."),
]
DateArg = Annotated[
    str | None,
    Field(description="Calendar date in M/D/YYYY format (e.g., '3/1/2025')."),
]



class CompletionOutput(BaseModel):
    """Structured content returned by the ask, research, and reason tools."""

    response: str = Field(description="AI-generated text response with numbered citation links")


class SearchOutput(BaseModel):
    """Structured content returned by the search tool."""

    results: str = Field(
        description="Formatted search results with titles, URLs, snippets, and dates"
    )


CompletionResultArg = Annotated[CallToolResult, CompletionOutput]
SearchResultArg = Annotated[CallToolResult, SearchOutput]


def text_result(text: str, key: str) -> CallToolResult:
    """Wrap *text* as both plain content and ``{key: text}`` structured content."""
    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        structuredContent={key: text},
    )


class PerplexityTools:
    """Tool handlers translating MCP arguments into core engine calls."""

    def __init__(self, completion: CompletionEngine, search: SearchEngine) -> None:
        self._completion = completion
        self._search = search

    async def ask(
        self,
        messages: MessagesArg,
        search_recency_filter: RecencyArg = None,
        search_domain_filter: DomainArg = None,
        search_context_size: ContextSizeArg = None,
        search_after_date_filter: DateArg = None,
        search_before_date_filter: DateArg = None,
        last_updated_after_filter: DateArg = None,
        last_updated_before_filter: DateArg = None,
    ) -> CompletionResultArg:
        """Answer a question using web-grounded AI (Sonar Pro model).

        Best for quick factual questions, summaries, explanations, and general Q&A.
        Returns a text response with numbered citations.
        """
        text = await self._run_completion(
            "perplexity_ask",
            messages,
            model=ASK_MODEL,
            filter_options={
                "recency": search_recency_filter,
                "search_after_date": search_after_date_filter,
                "search_before_date": search_before_date_filter,
                "last_updated_after": last_updated_after_filter,
                "last_updated_before": last_updated_before_filter,
                "domain_filter": search_domain_filter,
            },
            search_context_size=search_context_size,
        )
        return text_result(text, "response")

    async def research(
        self,
        messages: MessagesArg,
        strip_thinking: StripThinkingArg = False,
        reasoning_effort: EffortArg = None,
    ) -> CompletionResultArg:
        """Conduct deep, multi-source research on a topic (Sonar Deep Research model).

        Significantly slower than the other tools (30+ seconds). Returns a detailed
        response with numbered citations.
        """
        text = await self._run_completion(
            "perplexity_research",
            messages,
            model=RESEARCH_MODEL,
            strip_thinking=strip_thinking,
            reasoning_effort=reasoning_effort,
        )
        return text_result(text, "response")

    async def reason(
        self,
        messages: MessagesArg,
        strip_thinking: StripThinkingArg = False,
        search_recency_filter: RecencyArg = None,
        search_domain_filter: DomainArg = None,
        search_context_size: ContextSizeArg = None,
        search_after_date_filter: DateArg = None,
        search_before_date_filter: DateArg = None,
        last_updated_after_filter: DateArg = None,
        last_updated_before_filter: DateArg = None,
    ) -> CompletionResultArg:
        """Analyze a question using step-by-step reasoning with web grounding.

        Uses the Sonar Reasoning Pro model. Best for math, logic, comparisons, and
        complex arguments. Returns a reasoned response with numbered citations.
        """
        text = await self._run_completion(
            "perplexity_reason",
            messages,
            model=REASON_MODEL,
            strip_thinking=strip_thinking,
            filter_options={
                "recency": search_recency_filter,
                "search_after_date": search_after_date_filter,
                "search_before_date": search_before_date_filter,
                "last_updated_after": last_updated_after_filter,
                "last_updated_before": last_updated_before_filter,
                "domain_filter": search_domain_filter,
            },
            search_context_size=search_context_size,
        )
        return text_result(text, "response")

    async def search(
        self,
        query: Annotated[
            str | list[str],
            Field(description="Search query string or array of up to 5 query strings"),
        ],
        max_results: Annotated[
            int,
            Field(ge=1, le=20, description="Maximum number of results to return (1-20)"),
        ] = 10,
        max_tokens_per_page: Annotated[
            int,
            Field(ge=256, le=2048, description="Maximum tokens to extract per webpage"),
        ] = 1024,
        country: Annotated[
            str | None,
            Field(description="ISO 3166-1 alpha-2 country code for regional results (e.g., 'US')"),
        ] = None,
    ) -> SearchResultArg:
        """Search the web and return a ranked list of results.

        Each result carries a title, URL, snippet, and dates; no AI synthesis.
        """
        try:
            text = await self._search.search(
                query,
                max_results=max_results,
                max_tokens_per_page=max_tokens_per_page,
                country=country,
            )
        except PerplexityMCPError as exc:
            logger.warning("perplexity_search failed: %s", exc)
            raise
        return text_result(text, "results")

    async def _run_completion(
        self,
        tool_name: str,
        messages: list[ConversationMessage],
        *,
        model: str,
        strip_thinking: bool = False,
        filter_options: Mapping[str, Any] | None = None,
        reasoning_effort: ReasoningEffort | None = None,
        search_context_size: SearchContextSize | None = None,
    ) -> str:
        try:
            filters = build_filter_set(**filter_options) if filter_options else None
            return await self._completion.complete(
                messages,
                model=model,
                strip_thinking=strip_thinking,
                filters=filters,
                reasoning_effort=reasoning_effort,
                search_context_size=search_context_size,
                tool_name=tool_name,
            )
        except PerplexityMCPError as exc:
            logger.warning("%s failed: %s", tool_name, exc)
            raise


def build_server(
    settings_provider: SettingsProvider | None = None,
    *,
    dispatcher: HttpDispatcher | None = None,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> FastMCP:
    """Construct a FastMCP server wired to the completion and search engines."""
    provider = settings_provider or EnvironmentSettingsProvider()
    tools = PerplexityTools(
        CompletionEngine(provider, dispatcher=dispatcher),
        SearchEngine(provider, dispatcher=dispatcher),
    )
    server = FastMCP(
        SERVER_NAME,
        instructions=SERVER_INSTRUCTIONS,
        host=host,
        port=port,
        stateless_http=True,
        json_response=True,
    )
    server.add_tool(
        tools.ask,
        name="perplexity_ask",
        title="Ask Perplexity",
        annotations=READ_ONLY_ANNOTATIONS,
        structured_output=True,
    )
    server.add_tool(
        tools.research,
        name="perplexity_research",
        title="Deep Research",
        annotations=READ_ONLY_ANNOTATIONS,
        structured_output=True,
    )
    server.add_tool(
        tools.reason,
        name="perplexity_reason",
        title="Advanced Reasoning",
        annotations=READ_ONLY_ANNOTATIONS,
        structured_output=True,
    )
    server.add_tool(
        tools.search,
        name="perplexity_search",
        title="Search the Web",
        annotations=READ_ONLY_ANNOTATIONS,
        structured_output=True,
    )

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "service": SERVER_NAME})

    for path in HEALTH_PATHS:
        server.custom_route(path, methods=["GET"])(health)

    return server


__all__ = [
    "HEALTH_PATHS",
    "SERVER_INSTRUCTIONS",
    "SERVER_NAME",
    "CompletionOutput",
    "PerplexityTools",
    "SearchOutput",
    "build_server",
    "text_result",
]
