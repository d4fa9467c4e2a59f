"""Tool handlers."""

from .base import ToolContext, ToolHandler
from .gemini import GeminiArgs, GeminiHandler, build_request

__all__ = [
    "ToolContext",
    "ToolHandler",
    "GeminiArgs",
    "GeminiHandler",
    "build_request",
]
