"""Exception hierarchy for gemini-mcp.

Failure kinds that end an invocation before an aggregated result exists are
raised as exceptions. Everything recoverable (malformed lines, missing fields,
non-zero exit) is folded into ``AggregatedResult.error`` instead.
"""

from __future__ import annotations

__all__ = [
    "GeminiError",
    "RequestValidationError",
    "SpawnError",
    "StreamReadError",
    "ExecutionTimeoutError",
]


class GeminiError(Exception):
    """Base exception for gemini-mcp."""
    pass


class RequestValidationError(GeminiError, ValueError):
    """Invalid invocation request (empty prompt, out-of-range timeout)."""
    pass


class SpawnError(GeminiError):
    """The gemini executable could not be started.

    Attributes:
        executable: argv[0] that failed to start
    """

    def __init__(self, executable: str, reason: str) -> None:
        self.executable = executable
        self.reason = reason
        super().__init__(f"Failed to spawn gemini command '{executable}': {reason}")


class StreamReadError(GeminiError):
    """Reading one of the child's pipes failed.

    Attributes:
        stream: "stdout" or "stderr"
    """

    def __init__(self, stream: str, reason: str) -> None:
        self.stream = stream
        self.reason = reason
        super().__init__(f"Failed to read from {stream}: {reason}")


class ExecutionTimeoutError(GeminiError):
    """The deadline expired; the child was killed and reaped.

    Attributes:
        timeout_secs: the budget that was exceeded
    """

    def __init__(self, timeout_secs: float) -> None:
        self.timeout_secs = timeout_secs
        super().__init__(f"Gemini command timed out after {timeout_secs:g} seconds")
