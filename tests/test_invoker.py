"""GeminiInvoker tests.

Test coverage:
- Command line construction
- GEMINI.md and forced-model preparation
- End-to-end runs against the fake gemini CLI
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import pytest

from gemini_mcp.config import Config
from gemini_mcp.errors import ExecutionTimeoutError, SpawnError
from gemini_mcp.invokers.gemini import GeminiInvoker, build_command
from gemini_mcp.invokers.types import InvocationRequest
from gemini_mcp.invokers.validator import MISSING_AGENT_MESSAGES, MISSING_SESSION_ID
from gemini_mcp.runtime.process_runner import IS_WINDOWS, ProcessRunner


def make_invoker(gemini_bin: str, cwd: Path, **config_kwargs) -> GeminiInvoker:
    return GeminiInvoker(
        Config(gemini_bin=gemini_bin, **config_kwargs),
        cwd=cwd,
        runner=ProcessRunner(term_timeout=0.5, kill_timeout=0.3),
    )


class TestBuildCommand:
    """Test gemini argv construction."""

    def test_minimal(self):
        cmd = build_command("gemini", InvocationRequest(prompt="hi"))
        assert cmd == ["gemini", "--prompt", "hi", "-o", "stream-json"]

    def test_all_options(self):
        request = InvocationRequest(
            prompt="hi",
            sandbox=True,
            model="gemini-2.5-pro",
            session_id="abc",
        )
        assert build_command("/bin/gemini", request) == [
            "/bin/gemini",
            "--prompt",
            "hi",
            "-o",
            "stream-json",
            "--sandbox",
            "--model",
            "gemini-2.5-pro",
            "--resume",
            "abc",
        ]

    def test_prompt_is_one_argument(self):
        """Shell metacharacters and newlines pass through untouched."""
        prompt = 'line one\n"quoted" $HOME; rm -rf /'
        cmd = build_command("gemini", InvocationRequest(prompt=prompt))
        assert cmd[2] == prompt
        assert len(cmd) == 5


class TestPrepareRequest:
    """Test request preparation."""

    def test_gemini_md_prepended(self, tmp_path: Path):
        (tmp_path / "GEMINI.md").write_text("Answer in French.", encoding="utf-8")
        invoker = GeminiInvoker(Config(), cwd=tmp_path)

        prepared = invoker.prepare_request(InvocationRequest(prompt="hello"))
        assert prepared.prompt == "Answer in French.\n\nhello"

    def test_force_model_used_when_unset(self, tmp_path: Path):
        invoker = GeminiInvoker(Config(force_model="forced"), cwd=tmp_path)

        assert invoker.prepare_request(InvocationRequest(prompt="x")).model == "forced"
        assert invoker.prepare_request(
            InvocationRequest(prompt="x", model="explicit")
        ).model == "explicit"

    def test_request_not_mutated(self, tmp_path: Path):
        (tmp_path / "GEMINI.md").write_text("Prefix", encoding="utf-8")
        invoker = GeminiInvoker(Config(force_model="forced"), cwd=tmp_path)
        request = InvocationRequest(prompt="x")

        invoker.prepare_request(request)
        assert request.prompt == "x"
        assert request.model is None

    def test_resolve_timeout(self, tmp_path: Path):
        invoker = GeminiInvoker(Config(default_timeout_secs=42), cwd=tmp_path)

        assert invoker.resolve_timeout(InvocationRequest(prompt="x")) == 42
        assert invoker.resolve_timeout(InvocationRequest(prompt="x", timeout_secs=7)) == 7


@pytest.mark.skipif(IS_WINDOWS, reason="POSIX-specific tests")
class TestExecute:
    """End-to-end runs against the fake gemini CLI."""

    @pytest.mark.asyncio
    async def test_success(self, fake_gemini_bin: str, workspace: Path):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="hello")
        )

        assert result.to_dict() == {
            "success": True,
            "SESSION_ID": "s1",
            "agent_messages": "hello",
        }

    @pytest.mark.asyncio
    async def test_deprecation_notice_filtered(self, fake_gemini_bin: str, workspace: Path):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="deprecation")
        )

        assert result.success
        assert result.agent_messages == "hello"

    @pytest.mark.asyncio
    async def test_arguments_reach_gemini(self, fake_gemini_bin: str, workspace: Path):
        request = InvocationRequest(
            prompt="echo-args",
            sandbox=True,
            model="m1",
            session_id="abc",
        )
        result = await make_invoker(fake_gemini_bin, workspace).execute(request)

        assert result.success
        assert result.session_id == "abc"
        assert json.loads(result.agent_messages) == [
            "--prompt", "echo-args", "-o", "stream-json",
            "--sandbox", "--model", "m1", "--resume", "abc",
        ]

    @pytest.mark.asyncio
    async def test_gemini_md_and_force_model_reach_gemini(
        self, fake_gemini_bin: str, workspace: Path
    ):
        (workspace / "GEMINI.md").write_text("System rules", encoding="utf-8")
        invoker = make_invoker(fake_gemini_bin, workspace, force_model="forced")

        result = await invoker.execute(InvocationRequest(prompt="echo-args"))

        argv = json.loads(result.agent_messages)
        assert argv[1] == "System rules\n\necho-args"
        assert argv[-2:] == ["--model", "forced"]

    @pytest.mark.asyncio
    async def test_capture_all_messages(self, fake_gemini_bin: str, workspace: Path):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="hello", return_all_messages=True)
        )

        assert result.success
        assert len(result.to_dict()["all_messages"]) == 4

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, fake_gemini_bin: str, workspace: Path):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="fail")
        )

        assert not result.success
        assert result.session_id == "s1"
        assert result.agent_messages == "partial answer"
        assert "exit code: 1" in result.error
        assert "Stderr: boom" in result.error

    @pytest.mark.asyncio
    async def test_missing_session_id(self, fake_gemini_bin: str, workspace: Path):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="no-session")
        )

        assert not result.success
        assert result.error == MISSING_SESSION_ID
        assert result.agent_messages == "orphan reply"

    @pytest.mark.asyncio
    async def test_non_json_output_also_reports_missing_fields(
        self, fake_gemini_bin: str, workspace: Path
    ):
        result = await make_invoker(fake_gemini_bin, workspace).execute(
            InvocationRequest(prompt="noise")
        )

        assert not result.success
        assert result.error.startswith("No valid structured output received from gemini CLI.")
        assert MISSING_SESSION_ID in result.error
        assert result.error.endswith(MISSING_AGENT_MESSAGES)

    @pytest.mark.asyncio
    async def test_timeout(self, fake_gemini_bin: str, workspace: Path):
        pids: list[int] = []

        with pytest.raises(ExecutionTimeoutError):
            await make_invoker(fake_gemini_bin, workspace).execute(
                InvocationRequest(prompt="hang", timeout_secs=1),
                on_spawn=pids.append,
            )

        with pytest.raises(ProcessLookupError):
            os.kill(pids[0], 0)

    @pytest.mark.asyncio
    async def test_default_timeout_from_config(self, fake_gemini_bin: str, workspace: Path):
        invoker = make_invoker(fake_gemini_bin, workspace, default_timeout_secs=1)

        with pytest.raises(ExecutionTimeoutError) as exc_info:
            await invoker.execute(InvocationRequest(prompt="hang"))
        assert exc_info.value.timeout_secs == 1

    @pytest.mark.asyncio
    async def test_spawn_error(self, workspace: Path):
        invoker = make_invoker(str(workspace / "no-such-gemini"), workspace)

        with pytest.raises(SpawnError):
            await invoker.execute(InvocationRequest(prompt="hello"))

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_independent(
        self, fake_gemini_bin: str, workspace: Path
    ):
        invoker = make_invoker(fake_gemini_bin, workspace)

        results = await asyncio.gather(
            invoker.execute(InvocationRequest(prompt="hello", session_id="one")),
            invoker.execute(InvocationRequest(prompt="hello", session_id="two")),
            invoker.execute(InvocationRequest(prompt="fail")),
        )

        assert [r.session_id for r in results] == ["one", "two", "s1"]
        assert [r.success for r in results] == [True, True, False]
