"""MCP response formatter.

Renders an ``AggregatedResult`` as the plain-text body of a tool result.

Format:
    success: true
    SESSION_ID: <id>
    agent_messages: <text>
    [all_messages: N events captured

    Full event log:
    <pretty JSON>]

Failures render the error text, followed by the captured events when full
capture was requested.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from .invokers.types import AggregatedResult

if TYPE_CHECKING:
    from mcp.types import TextContent

__all__ = [
    "ResponseFormatter",
    "get_formatter",
    "format_text_response",
]

logger = logging.getLogger(__name__)


def _pretty_json(events: list[Any]) -> str | None:
    try:
        return json.dumps(events, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning(f"Cannot serialize captured events: {e}")
        return None


class ResponseFormatter:
    """Tool response formatter.

    Example:
        >>> formatter = ResponseFormatter()
        >>> result = AggregatedResult(session_id="s1", agent_messages="hello")
        >>> print(formatter.format_success(result))
        success: true
        SESSION_ID: s1
        agent_messages: hello
    """

    def format_success(self, result: AggregatedResult) -> str:
        parts = [
            "success: true",
            f"SESSION_ID: {result.session_id}",
            f"agent_messages: {result.agent_messages}",
        ]
        text = "\n".join(parts)

        if result.return_all_messages and result.all_messages:
            text += f"\nall_messages: {len(result.all_messages)} events captured"
            log = _pretty_json(result.all_messages)
            if log is not None:
                text += f"\n\nFull event log:\n{log}"

        return text

    def format_error(self, result: AggregatedResult) -> str:
        """Error text for a failed run, with captured events if requested."""
        text = result.error or "Unknown error"

        if result.return_all_messages and result.all_messages:
            text += f"\n\nCaptured {len(result.all_messages)} events before failure:"
            log = _pretty_json(result.all_messages)
            if log is not None:
                text += f"\n{log}"

        return text


# Global instance
_formatter: ResponseFormatter | None = None


def get_formatter() -> ResponseFormatter:
    """Return the shared formatter instance."""
    global _formatter
    if _formatter is None:
        _formatter = ResponseFormatter()
    return _formatter


def format_text_response(text: str) -> list[TextContent]:
    """Wrap ``text`` as MCP tool content."""
    from mcp.types import TextContent

    return [TextContent(type="text", text=text)]
