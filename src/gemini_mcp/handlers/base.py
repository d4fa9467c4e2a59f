"""Tool handler base abstractions.

Defines the tool handler protocol and its execution context.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp.types import TextContent

if TYPE_CHECKING:
    from ..config import Config
    from ..invokers.gemini import GeminiInvoker

__all__ = [
    "ToolContext",
    "ToolHandler",
]


@dataclass
class ToolContext:
    """Dependencies a tool handler needs for one call."""

    config: "Config"
    invoker: "GeminiInvoker"


class ToolHandler(ABC):
    """Tool handler protocol.

    Every tool exposed by the server implements this interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        ...

    @abstractmethod
    def get_input_schema(self) -> dict[str, Any]:
        """Input argument JSON schema."""
        ...

    @abstractmethod
    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> list[TextContent]:
        """Handle a tool call.

        Args:
            arguments: Tool arguments
            ctx: Execution context

        Returns:
            TextContent list

        Raises:
            McpError: the call failed; the server reports it as a tool error
        """
        ...
