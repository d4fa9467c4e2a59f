"""gemini-mcp - MCP server wrapping the Gemini CLI.

Environment variables:
    GEMINI_BIN: gemini executable (default "gemini")
    GEMINI_DEFAULT_TIMEOUT: default timeout in seconds (1-3600, default 600)
    GEMINI_FORCE_MODEL: default model when a request omits one

Usage:
    uvx gemini-mcp
"""

__version__ = "0.1.0"

from .app import main

__all__ = ["__version__", "main"]
