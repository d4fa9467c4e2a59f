"""Gemini CLI invoker.

Builds the gemini command line for an ``InvocationRequest``, runs it under a
deadline and returns the finalized ``AggregatedResult``.

Command format:
    gemini \
      --prompt "{prompt}" \
      -o stream-json \
      [--sandbox] \
      [--model {model}] \
      [--resume {session_id}]

The prompt is a single argv element; nothing goes through a shell, so no
quoting is applied.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from ..config import Config, get_config
from ..runtime.process_runner import ProcessRunner, ProcessSpec
from ..utils.prompt_prefix import prepare_prompt
from .types import AggregatedResult, InvocationRequest
from .validator import finalize

__all__ = ["GeminiInvoker", "build_command"]

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "stream-json"


def build_command(gemini_bin: str, request: InvocationRequest) -> list[str]:
    """Build the gemini argv for ``request``."""
    cmd = [gemini_bin, "--prompt", request.prompt, "-o", OUTPUT_FORMAT]

    if request.sandbox:
        cmd.append("--sandbox")
    if request.model:
        cmd.extend(["--model", request.model])
    if request.session_id:
        cmd.extend(["--resume", request.session_id])

    return cmd


class GeminiInvoker:
    """Run the gemini CLI and aggregate its stream-json output.

    One invoker may serve many concurrent requests: every ``execute()`` call
    owns its own child process and result.

    Example:
        invoker = GeminiInvoker()
        result = await invoker.execute(InvocationRequest(prompt="Explain main.py"))
        if result.success:
            print(result.session_id, result.agent_messages)
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        cwd: Path | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            config: Configuration (default: the process-wide one)
            cwd: Working directory for gemini and GEMINI.md lookup
                (default: current directory)
            runner: Process runner (default: a new ProcessRunner)
        """
        self._config = config or get_config()
        self._cwd = cwd
        self._runner = runner or ProcessRunner()

    @property
    def config(self) -> Config:
        return self._config

    def resolve_timeout(self, request: InvocationRequest) -> int:
        if request.timeout_secs is not None:
            return request.timeout_secs
        return self._config.default_timeout_secs

    def prepare_request(self, request: InvocationRequest) -> InvocationRequest:
        """Apply GEMINI.md and the forced default model."""
        prompt = prepare_prompt(request.prompt, self._cwd)
        model = request.model or self._config.force_model
        return replace(request, prompt=prompt, model=model)

    async def execute(
        self,
        request: InvocationRequest,
        *,
        on_spawn: Callable[[int], None] | None = None,
    ) -> AggregatedResult:
        """Run gemini for ``request`` and return the finalized result.

        Args:
            request: Validated invocation request
            on_spawn: Called with the child's pid once it has started

        Raises:
            SpawnError: gemini could not be started
            StreamReadError: reading gemini's stdout failed
            ExecutionTimeoutError: the deadline expired
        """
        start_time = time.time()
        timeout = self.resolve_timeout(request)
        prepared = self.prepare_request(request)
        cmd = build_command(self._config.gemini_bin, prepared)

        logger.info(
            f"Executing: {cmd[0]} (prompt {len(prepared.prompt)} chars, "
            f"sandbox={prepared.sandbox}, model={prepared.model or 'default'}, "
            f"resume={prepared.session_id or '-'}, timeout={timeout}s)"
        )

        result = await self._runner.run(
            ProcessSpec(argv=cmd, cwd=self._cwd),
            capture_all=request.return_all_messages,
            timeout=timeout,
            on_spawn=on_spawn,
        )
        result = finalize(result)

        logger.info(
            f"gemini finished: success={result.success} "
            f"session_id={result.session_id or '-'} "
            f"exit_code={result.exit_code} "
            f"duration={time.time() - start_time:.3f}s"
        )
        return result
