"""Process runner with concurrent stream draining and reliable termination.

This module provides:
- Cross-platform subprocess isolation (new session/process group)
- A single run loop multiplexing stdout and stderr line by line
- Bounded diagnostics (stderr bytes, non-JSON lines, captured events)
- An optional hard deadline with kill-and-reap on expiry
- Cancel-safe cleanup using asyncio.shield

Key design points:
- POSIX: start_new_session=True to create new process group
- Windows: CREATE_NEW_PROCESS_GROUP for signal isolation
- stdin is DEVNULL: the MCP server's own stdin is the JSON-RPC channel and
  must never be inherited by the child
- Both pipes are always read, so a child blocked writing to one of them can
  never stall the other
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import signal
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import SpawnError, StreamReadError
from ..invokers.interpreter import apply_event
from ..invokers.types import (
    MAX_NON_JSON_LINES,
    MAX_STDERR_BYTES,
    AggregatedResult,
)
from .buffers import BoundedTextBuffer, CappedList
from .deadline import run_with_deadline
from .line_reader import LineReader

__all__ = [
    "ProcessRunner",
    "ProcessSpec",
]

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"

# Default timeouts
DEFAULT_TERM_TIMEOUT = 2.0  # seconds to wait after SIGTERM
DEFAULT_KILL_TIMEOUT = 1.0  # seconds to wait after SIGKILL

# StreamReader buffer limit; longer lines are read piecewise
DEFAULT_LINE_LIMIT = 1024 * 1024


@dataclass(frozen=True)
class ProcessSpec:
    """Specification for a subprocess to run.

    Attributes:
        argv: Command line arguments (first element is the executable)
        cwd: Working directory for the process (None = inherit)
    """

    argv: list[str]
    cwd: Path | None = None


@dataclass
class _StreamState:
    """Per-run diagnostics owned by the run loop."""

    stderr: BoundedTextBuffer
    non_json_lines: CappedList[str]
    valid_json_seen: bool = False


@dataclass
class ProcessRunner:
    """Spawn a stream-json CLI and aggregate its output.

    Example:
        runner = ProcessRunner()
        spec = ProcessSpec(argv=["gemini", "--prompt", "hi", "-o", "stream-json"])
        result = await runner.run(spec, capture_all=False, timeout=600)
    """

    term_timeout: float = DEFAULT_TERM_TIMEOUT
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    line_limit: int = DEFAULT_LINE_LIMIT

    async def run(
        self,
        spec: ProcessSpec,
        *,
        capture_all: bool = False,
        timeout: float | None = None,
        on_spawn: Callable[[int], None] | None = None,
    ) -> AggregatedResult:
        """Run the process to completion and return the aggregated result.

        The result is not yet validated for required fields; see
        ``invokers.validator.finalize``.

        Args:
            spec: Process specification
            capture_all: Keep every decoded event in ``all_messages``
            timeout: Deadline in seconds (None = no deadline)
            on_spawn: Called with the child's pid right after it starts

        Raises:
            SpawnError: The executable could not be started
            StreamReadError: Reading stdout failed
            ExecutionTimeoutError: The deadline expired (child is reaped)
        """
        process = await self._spawn(spec)

        try:
            if on_spawn:
                on_spawn(process.pid)
            drain = self._drain(process, capture_all)
            if timeout is None:
                return await drain
            return await run_with_deadline(
                drain,
                seconds=timeout,
                on_expire=lambda: self._force_kill(process),
            )
        finally:
            await self._safe_cleanup(process)

    async def _spawn(self, spec: ProcessSpec) -> asyncio.subprocess.Process:
        kwargs = self._build_subprocess_kwargs()
        try:
            process = await asyncio.create_subprocess_exec(
                *spec.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=spec.cwd,
                limit=self.line_limit,
                **kwargs,
            )
        except OSError as e:
            # FileNotFoundError, PermissionError, bad cwd, ...
            raise SpawnError(spec.argv[0], str(e)) from e

        logger.debug(
            f"Started subprocess pid={process.pid} "
            f"argv={spec.argv[0]} cwd={spec.cwd}"
        )
        return process

    def _build_subprocess_kwargs(self) -> dict[str, Any]:
        """Build platform-specific subprocess kwargs."""
        kwargs: dict[str, Any] = {}

        if IS_WINDOWS:
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            kwargs["start_new_session"] = True

        return kwargs

    async def _drain(
        self,
        process: asyncio.subprocess.Process,
        capture_all: bool,
    ) -> AggregatedResult:
        """Multiplex stdout and stderr until both close, then reap.

        Exactly one line is handled at a time, so the result has a single
        writer even though two sources are watched.
        """
        assert process.stdout is not None and process.stderr is not None

        result = AggregatedResult(return_all_messages=capture_all)
        state = _StreamState(
            stderr=BoundedTextBuffer(MAX_STDERR_BYTES),
            non_json_lines=CappedList(MAX_NON_JSON_LINES),
        )
        stdout_reader = LineReader(process.stdout, name="stdout")
        stderr_reader = LineReader(
            process.stderr, name="stderr", max_line_bytes=MAX_STDERR_BYTES
        )

        pending: dict[asyncio.Task[str | None], LineReader] = {}

        def arm(reader: LineReader) -> None:
            pending[asyncio.ensure_future(reader.next_line())] = reader

        arm(stdout_reader)
        arm(stderr_reader)

        try:
            while pending:
                done, _ = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                # stdout first when both are ready
                for task in sorted(done, key=lambda t: pending[t] is not stdout_reader):
                    reader = pending.pop(task)

                    if reader is stdout_reader:
                        line = task.result()  # StreamReadError aborts the run
                        if line is None:
                            continue
                        arm(stdout_reader)
                        self._handle_stdout_line(line, result, state, capture_all)
                    else:
                        try:
                            line = task.result()
                        except StreamReadError as e:
                            logger.warning(f"Warning: {e}")
                            continue
                        if line is None:
                            continue
                        arm(stderr_reader)
                        state.stderr.append_line(line)
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        returncode = await process.wait()
        result.exit_code = returncode

        logger.debug(
            f"Subprocess completed pid={process.pid} returncode={returncode} "
            f"non_json_lines={len(state.non_json_lines)} "
            f"stderr_bytes={state.stderr.size}"
        )

        self._apply_exit_status(result, state, returncode)
        return result

    def _handle_stdout_line(
        self,
        line: str,
        result: AggregatedResult,
        state: _StreamState,
        capture_all: bool,
    ) -> None:
        trimmed = line.strip()
        if not trimmed:
            return

        try:
            event = json.loads(trimmed)
        except json.JSONDecodeError:
            state.non_json_lines.append(trimmed)
            logger.debug(f"Non-JSON line: {trimmed[:100]}")
            return

        state.valid_json_seen = True
        apply_event(event, result, capture_all)

    def _apply_exit_status(
        self,
        result: AggregatedResult,
        state: _StreamState,
        returncode: int,
    ) -> None:
        non_json_output = "\n".join(state.non_json_lines)

        if returncode != 0:
            message = result.error or f"gemini command failed with exit code: {returncode}"
            stderr_text = state.stderr.getvalue()
            if stderr_text:
                message = f"{message}\nStderr: {stderr_text}"
            if state.non_json_lines:
                message = f"{message}\nNon-JSON output: {non_json_output}"
            result.mark_failed(message)
            logger.warning(f"gemini exited with code {returncode}")
        elif state.non_json_lines and not state.valid_json_seen:
            result.mark_failed(
                "No valid structured output received from gemini CLI.\n"
                f"Output: {non_json_output}"
            )

    async def _force_kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill the process group outright and wait for the child to exit."""
        if process.returncode is not None:
            return

        self._signal_group(process, graceful=False)
        await process.wait()
        logger.debug(
            f"Subprocess killed on deadline pid={process.pid} "
            f"returncode={process.returncode}"
        )

    async def _safe_cleanup(self, process: asyncio.subprocess.Process) -> None:
        """Stop the process if still running, shielded from cancellation."""
        if process.returncode is not None:
            return

        task = asyncio.ensure_future(self._stop(process))
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            # Finish reaping before the cancellation propagates
            await task
            raise

    async def _stop(self, process: asyncio.subprocess.Process) -> None:
        """Ask the process group to exit, escalating to a kill.

        SIGTERM (CTRL_BREAK_EVENT on Windows), up to ``term_timeout`` to
        exit, then SIGKILL and up to ``kill_timeout`` to be reaped.
        """
        pid = process.pid
        steps = (
            (True, self.term_timeout),
            (False, self.kill_timeout),
        )
        for graceful, grace_period in steps:
            self._signal_group(process, graceful=graceful)
            try:
                await asyncio.wait_for(process.wait(), timeout=grace_period)
            except asyncio.TimeoutError:
                logger.debug(
                    f"Subprocess pid={pid} still running after "
                    f"{'SIGTERM' if graceful else 'SIGKILL'}"
                )
                continue
            logger.debug(f"Subprocess stopped pid={pid} returncode={process.returncode}")
            return

        logger.warning(f"Subprocess did not exit after kill pid={pid}")

    def _signal_group(self, process: asyncio.subprocess.Process, *, graceful: bool) -> None:
        """Signal the child's process group (the child alone as a fallback)."""
        if process.returncode is not None:
            return

        try:
            if IS_WINDOWS:
                if graceful:
                    os.kill(process.pid, signal.CTRL_BREAK_EVENT)
                else:
                    process.kill()
                return
            sig = signal.SIGTERM if graceful else signal.SIGKILL
            os.killpg(os.getpgid(process.pid), sig)
        except ProcessLookupError:
            logger.debug(f"Subprocess already exited pid={process.pid}")
        except OSError as e:
            logger.debug(f"Group signal failed for pid={process.pid}, signalling child: {e}")
            try:
                if graceful:
                    process.terminate()
                else:
                    process.kill()
            except ProcessLookupError:
                pass
