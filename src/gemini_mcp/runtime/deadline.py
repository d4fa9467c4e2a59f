"""Wall-clock deadline for a supervised run."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..errors import ExecutionTimeoutError

__all__ = ["run_with_deadline"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_deadline(
    awaitable: Awaitable[T],
    *,
    seconds: float,
    on_expire: Callable[[], Awaitable[None]],
) -> T:
    """Await ``awaitable`` for at most ``seconds``.

    On expiry the awaitable is cancelled and its partial work discarded,
    then ``on_expire`` runs to completion (shielded from cancellation) before
    the timeout is reported. ``on_expire`` is where the child gets killed and
    reaped, so no process outlives the error.

    Raises:
        ExecutionTimeoutError: the deadline expired
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        logger.warning(f"Deadline of {seconds:g}s expired, killing subprocess")

    cleanup = asyncio.ensure_future(on_expire())
    try:
        await asyncio.shield(cleanup)
    except asyncio.CancelledError:
        # Let the kill finish before propagating the cancellation
        await cleanup
        raise

    raise ExecutionTimeoutError(seconds)
