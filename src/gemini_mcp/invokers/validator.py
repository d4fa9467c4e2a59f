"""Final gate on an aggregated result."""

from __future__ import annotations

from .types import AggregatedResult

__all__ = ["finalize"]

MISSING_SESSION_ID = "Failed to get `SESSION_ID` from the gemini session."
MISSING_AGENT_MESSAGES = (
    "Failed to get `agent_messages` from the gemini session.\n"
    "You can try to set `return_all_messages` to `True` to get the full information."
)
MISSING_ANY_MESSAGES = "Failed to get any messages from the gemini session."


def finalize(result: AggregatedResult) -> AggregatedResult:
    """Require a session id and some output, regardless of exit status.

    Validation errors are newline-joined and appended after any error the
    supervisor already recorded. Extracted fields are left untouched.
    """
    errors: list[str] = []

    if not result.session_id:
        errors.append(MISSING_SESSION_ID)

    if not result.agent_messages:
        if not result.return_all_messages:
            errors.append(MISSING_AGENT_MESSAGES)
        elif not result.all_messages:
            errors.append(MISSING_ANY_MESSAGES)

    if errors:
        result.mark_failed()
        result.append_error("\n".join(errors))

    return result
