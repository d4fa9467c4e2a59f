"""Gemini stream-json event interpreter.

Folds one decoded JSON value into an ``AggregatedResult``. No I/O; the only
side effect is on the result passed in.

Keys consumed (all top level):
    session_id: conversation id, last non-empty value wins
    type: discriminator ("message", "error", "result", ...)
    role: "assistant" for model output
    content: message text
    error: {"message": ...} on failure events
    message: fallback error text
"""

from __future__ import annotations

from typing import Any

from .types import MAX_MESSAGES_LIMIT, AggregatedResult

__all__ = [
    "apply_event",
    "PROMPT_DEPRECATION_WARNING",
]

# Emitted by gemini itself as an assistant message; not model output
PROMPT_DEPRECATION_WARNING = "The --prompt (-p) flag has been deprecated"

KEY_SESSION_ID = "session_id"
KEY_TYPE = "type"
KEY_ROLE = "role"
KEY_CONTENT = "content"
KEY_ERROR = "error"
KEY_MESSAGE = "message"
TYPE_MESSAGE = "message"
ROLE_ASSISTANT = "assistant"

ERROR_PREFIX = "gemini error: "


def _get_str(event: Any, key: str) -> str | None:
    if not isinstance(event, dict):
        return None
    value = event.get(key)
    return value if isinstance(value, str) else None


def apply_event(
    event: Any,
    state: AggregatedResult,
    capture_all: bool,
) -> AggregatedResult:
    """Apply one decoded event to ``state`` and return it.

    Any JSON shape is accepted; rules whose keys are missing or of the wrong
    type are skipped.

    Args:
        event: decoded JSON value (object, array or scalar)
        state: result being built, mutated in place
        capture_all: keep the raw event in ``state.all_messages``

    Returns:
        ``state``
    """
    if capture_all and len(state.all_messages) < MAX_MESSAGES_LIMIT:
        state.all_messages.append(event)

    session_id = _get_str(event, KEY_SESSION_ID)
    if session_id:
        state.session_id = session_id

    item_type = _get_str(event, KEY_TYPE) or ""
    item_role = _get_str(event, KEY_ROLE) or ""

    if item_type == TYPE_MESSAGE and item_role == ROLE_ASSISTANT:
        content = _get_str(event, KEY_CONTENT)
        if content and content != PROMPT_DEPRECATION_WARNING:
            state.append_agent_message(content)

    type_lower = item_type.lower()
    has_explicit_error = "fail" in type_lower or "error" in type_lower
    has_error_key = isinstance(event, dict) and KEY_ERROR in event

    if has_explicit_error or has_error_key:
        message: str | None = None
        error_obj = event.get(KEY_ERROR) if isinstance(event, dict) else None
        if isinstance(error_obj, dict):
            nested = error_obj.get(KEY_MESSAGE)
            if isinstance(nested, str):
                message = nested
        else:
            message = _get_str(event, KEY_MESSAGE)

        state.mark_failed(f"{ERROR_PREFIX}{message}" if message is not None else None)

    return state
