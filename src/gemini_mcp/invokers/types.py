"""Invocation request and aggregated result types.

Defines the input of one gemini run, the state built up while its event
stream is drained, and the limits shared by both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import RequestValidationError

__all__ = [
    "InvocationRequest",
    "AggregatedResult",
    "MIN_TIMEOUT_SECS",
    "MAX_TIMEOUT_SECS",
    "DEFAULT_TIMEOUT_SECS",
    "MAX_MESSAGES_LIMIT",
    "MAX_NON_JSON_LINES",
    "MAX_STDERR_BYTES",
    "validate_timeout",
]

MIN_TIMEOUT_SECS = 1
MAX_TIMEOUT_SECS = 3600
DEFAULT_TIMEOUT_SECS = 600  # 10 minutes

MAX_MESSAGES_LIMIT = 10_000
MAX_NON_JSON_LINES = 1_000
MAX_STDERR_BYTES = 100_000


def validate_timeout(value: Any) -> int:
    """Check that ``value`` is an integer number of seconds within bounds.

    Raises:
        RequestValidationError: wrong type or outside [1, 3600]
    """
    # bool is an int subclass; True must not mean "1 second"
    if isinstance(value, bool) or not isinstance(value, int):
        raise RequestValidationError(
            f"timeout_secs must be an integer between {MIN_TIMEOUT_SECS} "
            f"and {MAX_TIMEOUT_SECS} seconds"
        )
    if not MIN_TIMEOUT_SECS <= value <= MAX_TIMEOUT_SECS:
        raise RequestValidationError(
            f"timeout_secs must be between {MIN_TIMEOUT_SECS} "
            f"and {MAX_TIMEOUT_SECS} seconds"
        )
    return value


@dataclass(frozen=True)
class InvocationRequest:
    """One gemini run.

    Validated on construction, so an instance that exists can be spawned.

    Attributes:
        prompt: task text (required, not blank)
        sandbox: run gemini with --sandbox
        session_id: resume this conversation (empty string means a new one)
        model: model override
        return_all_messages: keep every decoded event (capped)
        timeout_secs: deadline for this run; None uses the configured default
    """

    prompt: str
    sandbox: bool = False
    session_id: str | None = None
    model: str | None = None
    return_all_messages: bool = False
    timeout_secs: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise RequestValidationError(
                "Prompt must be a non-empty, non-whitespace string"
            )
        if self.model is not None and not self.model.strip():
            raise RequestValidationError(
                "Model overrides must be explicitly requested as a "
                "non-empty, non-whitespace string"
            )
        if self.timeout_secs is not None:
            validate_timeout(self.timeout_secs)
        if self.session_id == "":
            object.__setattr__(self, "session_id", None)


@dataclass
class AggregatedResult:
    """Outcome of one gemini run, built incrementally from its events.

    ``success`` starts True and only ever goes to False through
    ``mark_failed()``. ``agent_messages`` is only ever appended to.

    Attributes:
        success: whether the run succeeded
        session_id: last non-empty session id seen
        agent_messages: assistant text fragments, newline-joined
        all_messages: raw events (only with return_all_messages)
        return_all_messages: whether full capture was requested
        error: human-readable failure description
        exit_code: child exit status, once known
    """

    success: bool = True
    session_id: str = ""
    agent_messages: str = ""
    all_messages: list[Any] = field(default_factory=list)
    return_all_messages: bool = False
    error: str | None = None
    exit_code: int | None = None

    def mark_failed(self, error: str | None = None) -> None:
        """Mark the run failed, optionally replacing the error text."""
        self.success = False
        if error is not None:
            self.error = error

    def append_agent_message(self, text: str) -> None:
        if self.agent_messages:
            self.agent_messages += "\n"
        self.agent_messages += text

    def append_error(self, text: str) -> None:
        """Append ``text`` after any existing error, newline-separated."""
        if self.error:
            self.error = f"{self.error}\n{text}"
        else:
            self.error = text

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "SESSION_ID": self.session_id,
            "agent_messages": self.agent_messages,
        }
        if self.return_all_messages:
            result["all_messages"] = list(self.all_messages)
        if self.error:
            result["error"] = self.error
        return result
