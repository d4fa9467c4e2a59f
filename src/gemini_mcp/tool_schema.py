"""Tool schema definition.

Tool name, description and the JSON schema of the ``gemini`` tool's
arguments.
"""

from __future__ import annotations

from typing import Any

from .invokers.types import MAX_TIMEOUT_SECS, MIN_TIMEOUT_SECS

__all__ = [
    "TOOL_NAME",
    "TOOL_DESCRIPTION",
    "SERVER_INSTRUCTIONS",
    "create_tool_schema",
]

TOOL_NAME = "gemini"

TOOL_DESCRIPTION = """Invokes the Gemini CLI to execute AI-driven tasks, returning structured JSON events and a session identifier for conversation continuity.

RETURN STRUCTURE:
- success: boolean indicating execution status
- SESSION_ID: unique identifier for resuming this conversation in future calls
- agent_messages: concatenated assistant response text
- all_messages: (optional) complete array of JSON events when return_all_messages=True
- error: error description when success=False

BEST PRACTICES:
- Always capture and reuse SESSION_ID for multi-turn interactions
- Enable sandbox mode when file modifications should be isolated
- Use return_all_messages only when detailed execution traces are necessary (increases payload size)"""

SERVER_INSTRUCTIONS = (
    "This server provides a gemini tool for AI-driven tasks. "
    "Use the gemini tool to execute tasks via the Gemini CLI."
)


def create_tool_schema() -> dict[str, Any]:
    """Create the input schema of the gemini tool."""
    return {
        "type": "object",
        "properties": {
            "PROMPT": {
                "type": "string",
                "description": "Instruction for the task to send to gemini",
            },
            "sandbox": {
                "type": "boolean",
                "default": False,
                "description": "Run in sandbox mode. Defaults to `False`",
            },
            "SESSION_ID": {
                "type": "string",
                "description": (
                    "Resume the specified session of the gemini. "
                    "If not provided or empty, starts a new session"
                ),
            },
            "return_all_messages": {
                "type": "boolean",
                "default": False,
                "description": (
                    "Return all messages (e.g. reasoning, tool calls, etc.) from the "
                    "gemini session. Set to `False` by default, only the agent's "
                    "final reply message is returned"
                ),
            },
            "model": {
                "type": "string",
                "description": (
                    "The model to use for the gemini session. If not specified, uses "
                    "GEMINI_FORCE_MODEL environment variable or the Gemini CLI default"
                ),
            },
            "timeout_secs": {
                "type": "integer",
                "minimum": MIN_TIMEOUT_SECS,
                "maximum": MAX_TIMEOUT_SECS,
                "description": (
                    f"Timeout in seconds for gemini execution ({MIN_TIMEOUT_SECS}-"
                    f"{MAX_TIMEOUT_SECS}). If not specified, uses GEMINI_DEFAULT_TIMEOUT "
                    "environment variable or falls back to 600 seconds (10 minutes)."
                ),
            },
        },
        "required": ["PROMPT"],
    }
