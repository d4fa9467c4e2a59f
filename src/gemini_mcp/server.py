"""gemini-mcp MCP server.

Exposes a single ``gemini`` tool over the MCP low-level server API.

Environment variables:
    GEMINI_BIN: gemini executable (default "gemini")
    GEMINI_DEFAULT_TIMEOUT: default timeout in seconds (1-3600, default 600)
    GEMINI_FORCE_MODEL: model used when a request omits "model"
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from . import __version__
from .config import Config, get_config
from .handlers import GeminiHandler, ToolContext, ToolHandler
from .invokers.gemini import GeminiInvoker
from .tool_schema import SERVER_INSTRUCTIONS

__all__ = ["create_server"]

logger = logging.getLogger(__name__)


def create_server(
    config: Config | None = None,
    invoker: GeminiInvoker | None = None,
) -> Server:
    """Create the MCP server instance.

    Args:
        config: Configuration (default: the process-wide one)
        invoker: Gemini invoker (default: one built from ``config``)
    """
    config = config or get_config()
    invoker = invoker or GeminiInvoker(config)
    server = Server(
        "gemini-mcp",
        version=__version__,
        instructions=SERVER_INSTRUCTIONS,
    )

    handlers: dict[str, ToolHandler] = {}
    for handler in (GeminiHandler(),):
        handlers[handler.name] = handler

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        tools = [
            Tool(
                name=handler.name,
                description=handler.description,
                inputSchema=handler.get_input_schema(),
            )
            for handler in handlers.values()
        ]
        logger.debug(f"[MCP] list_tools called, returning {[t.name for t in tools]}")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Dispatch a tool call."""
        logger.debug(
            f"[MCP] call_tool request:\n"
            f"  Tool: {name}\n"
            f"  Arguments: {json.dumps({k: v[:100] + '...' if isinstance(v, str) and len(v) > 100 else v for k, v in (arguments or {}).items()}, ensure_ascii=False, default=str)}"
        )

        handler = handlers.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool '{name}'")

        ctx = ToolContext(config=config, invoker=invoker)
        return await handler.handle(arguments or {}, ctx)

    return server
