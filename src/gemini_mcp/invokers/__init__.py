"""Gemini invocation types and stream interpretation.

Basic usage:
    from gemini_mcp.invokers import InvocationRequest
    from gemini_mcp.invokers.gemini import GeminiInvoker

    invoker = GeminiInvoker()
    result = await invoker.execute(InvocationRequest(prompt="Review this code"))

``GeminiInvoker`` lives in ``invokers.gemini`` and is not re-exported here:
the runtime imports this package for the interpreter, and the invoker
imports the runtime.
"""

from __future__ import annotations

from .interpreter import PROMPT_DEPRECATION_WARNING, apply_event
from .types import (
    DEFAULT_TIMEOUT_SECS,
    MAX_MESSAGES_LIMIT,
    MAX_NON_JSON_LINES,
    MAX_STDERR_BYTES,
    MAX_TIMEOUT_SECS,
    MIN_TIMEOUT_SECS,
    AggregatedResult,
    InvocationRequest,
    validate_timeout,
)
from .validator import finalize

__all__ = [
    "AggregatedResult",
    "InvocationRequest",
    "apply_event",
    "finalize",
    "validate_timeout",
    "PROMPT_DEPRECATION_WARNING",
    "DEFAULT_TIMEOUT_SECS",
    "MAX_MESSAGES_LIMIT",
    "MAX_NON_JSON_LINES",
    "MAX_STDERR_BYTES",
    "MAX_TIMEOUT_SECS",
    "MIN_TIMEOUT_SECS",
]
