"""MCP tool server for the login-only image platforms.

Exposes ``search_savee``, ``search_pinterest`` and ``search_shotdeck`` over
stdio so an assistant can pull raw platform results without the ranking
pipeline. Each tool takes ``query`` and an optional ``limit`` and returns a
JSON array of images, or ``{"error": ..., "status": ...}`` when the platform
could not be searched.

Usage:
    python -m src.functions.moodboard_search.functions.mcp_server
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from mcp.server.fastmcp import FastMCP

# Ensure project root is on sys.path before importing project modules
project_root = Path(__file__).parent.parent.parent.parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.moodboard_search.core.adapters.base import SourceAdapter
from src.functions.moodboard_search.core.adapters.registry import build_adapters
from src.functions.moodboard_search.core.config import MoodboardSettings, load_settings
from src.functions.moodboard_search.core.contracts.candidate import Source
from src.functions.moodboard_search.core.normalizer import normalize
from src.functions.moodboard_search.core.sessions import BrowserSessionManager
from src.functions.moodboard_search.core.sessions.browser_session import Launcher

logger = logging.getLogger(__name__)

SERVER_NAME = "moodboard-image-scraper"
SERVER_INSTRUCTIONS = (
    "Search Savee, Pinterest and Shotdeck for reference images. "
    "Each tool returns raw, unranked platform results as JSON."
)
DEFAULT_TOOL_LIMIT = 30
MAX_TOOL_LIMIT = 100

TOOL_PLATFORMS = {
    "search_savee": (Source.SAVEE, "Search Savee.it for images (requires login)"),
    "search_pinterest": (Source.PINTEREST, "Search Pinterest for images (requires login)"),
    "search_shotdeck": (Source.SHOTDECK, "Search Shotdeck for film stills (requires login)"),
}

ToolResult = Union[List[Dict[str, Any]], Dict[str, str]]


async def run_tool_search(adapter: SourceAdapter, query: str, limit: Optional[int] = None) -> ToolResult:
    """Search one platform and shape the outcome for a tool response."""

    query = " ".join((query or "").split())
    if not query:
        return {"error": "query is required", "status": "invalid"}
    bounded = max(1, min(limit or DEFAULT_TOOL_LIMIT, MAX_TOOL_LIMIT))

    result = await adapter.search(query, bounded)
    if not result.ok:
        return {"error": str(result.error), "status": result.status}
    return [candidate.to_dict() for candidate in normalize(adapter.source, result.records)]


def _make_tool(adapter: SourceAdapter) -> Callable[..., Awaitable[str]]:
    async def search(query: str, limit: int = DEFAULT_TOOL_LIMIT) -> str:
        payload = await run_tool_search(adapter, query, limit)
        return json.dumps(payload, ensure_ascii=False, indent=2)

    return search


def register_search_tools(mcp: FastMCP, adapters: Mapping[Source, SourceAdapter]) -> List[str]:
    """Register one search tool per browser platform that has an adapter.

    Returns:
        Names of the registered tools
    """
    registered = []
    for tool_name, (platform, description) in TOOL_PLATFORMS.items():
        adapter = adapters.get(platform)
        if adapter is None:
            logger.warning("No adapter for %s; %s not registered", platform.value, tool_name)
            continue
        mcp.add_tool(_make_tool(adapter), name=tool_name, description=description)
        registered.append(tool_name)
    logger.info("Registered MCP tools: %s", ", ".join(registered))
    return registered


def create_server(
    settings: Optional[MoodboardSettings] = None,
    *,
    launcher: Optional[Launcher] = None,
) -> FastMCP:
    """Build the server; it owns one browser session manager for its lifetime."""

    settings = settings or load_settings()
    sessions = BrowserSessionManager(settings.browser, launcher=launcher)
    adapters = build_adapters(settings, sessions)

    @asynccontextmanager
    async def lifespan(server: FastMCP):
        try:
            yield {}
        finally:
            logger.info("Shutting down browser sessions")
            await sessions.close()

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS, lifespan=lifespan)
    register_search_tools(mcp, adapters)
    return mcp


def main() -> None:
    load_env()
    # stdout carries the protocol
    setup_logging(stream=sys.stderr)
    create_server().run()


if __name__ == "__main__":
    main()
