"""Tests for the process executor."""

import asyncio
import signal
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, PropertyMock

import pytest

from cli_bridge.errors import ExecutionTimeout, NonZeroExit, SpawnFailure
from cli_bridge.executor import ExecutionResult, ProcessExecutor, RunningProcess

from .conftest import MakeProgram, python_args


@pytest.fixture()
def spawned(monkeypatch: pytest.MonkeyPatch) -> list[asyncio.subprocess.Process]:
    """Record every child process the executor creates."""
    processes: list[asyncio.subprocess.Process] = []
    real = asyncio.create_subprocess_exec

    async def spy(*args: object, **kwargs: object) -> asyncio.subprocess.Process:
        proc = await real(*args, **kwargs)  # type: ignore[arg-type]
        processes.append(proc)
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", spy)
    return processes


async def _wait_until_running(executor: ProcessExecutor) -> None:
    for _ in range(500):
        if executor.running:
            return
        await asyncio.sleep(0.01)
    raise AssertionError("child never started")


# -- RunningProcess --


def test_running_process_pid():
    proc = MagicMock()
    proc.pid = 42
    rp = RunningProcess(proc)
    assert rp.pid == 42


def test_running_process_returncode_none():
    proc = MagicMock()
    type(proc).returncode = PropertyMock(return_value=None)
    rp = RunningProcess(proc)
    assert rp.returncode is None


async def test_running_process_communicate_decodes():
    proc = AsyncMock()
    proc.communicate.return_value = (b"out \xff", None)
    rp = RunningProcess(proc)
    stdout, stderr = await rp.communicate("hello")
    proc.communicate.assert_awaited_once_with(b"hello")
    assert stdout == "out \ufffd"
    assert stderr == ""


async def test_running_process_communicate_without_input():
    proc = AsyncMock()
    proc.communicate.return_value = (b"", b"")
    rp = RunningProcess(proc)
    await rp.communicate()
    proc.communicate.assert_awaited_once_with(None)


def test_running_process_kill():
    proc = MagicMock()
    rp = RunningProcess(proc)
    rp.kill()
    proc.kill.assert_called_once()


def test_running_process_kill_already_exited():
    proc = MagicMock()
    proc.kill.side_effect = ProcessLookupError
    rp = RunningProcess(proc)
    rp.kill()


# -- ProcessExecutor.execute --


async def test_execute_returns_trimmed_stdout():
    program, args = python_args("print('  hello world  ')")
    result = await ProcessExecutor().execute(program, args)
    assert isinstance(result, ExecutionResult)
    assert result.text == "hello world"
    assert result.stdout == "  hello world  \n"
    assert result.returncode == 0


async def test_execute_feeds_stdin_and_closes_it():
    program, args = python_args("import sys; print(sys.stdin.read().upper())")
    result = await ProcessExecutor().execute(program, args, input_text="a prompt")
    assert result.text == "A PROMPT"


async def test_execute_without_input_sends_eof():
    program, args = python_args("import sys; print(repr(sys.stdin.read()))")
    result = await ProcessExecutor().execute(program, args)
    assert result.text == "''"


async def test_execute_captures_stderr_on_success():
    program, args = python_args("import sys; sys.stderr.write('warning'); print('ok')")
    result = await ProcessExecutor().execute(program, args)
    assert result.text == "ok"
    assert result.stderr == "warning"


async def test_execute_empty_output_uses_placeholder():
    program, args = python_args("pass")
    executor = ProcessExecutor(empty_output_placeholder="(nothing)")
    result = await executor.execute(program, args)
    assert result.text == "(nothing)"


async def test_execute_whitespace_output_uses_placeholder():
    program, args = python_args("print('   ')")
    executor = ProcessExecutor(empty_output_placeholder="(nothing)")
    result = await executor.execute(program, args)
    assert result.text == "(nothing)"


async def test_execute_empty_output_without_placeholder():
    program, args = python_args("pass")
    result = await ProcessExecutor().execute(program, args)
    assert result.text == ""


async def test_execute_nonzero_exit():
    program, args = python_args(
        "import sys; sys.stderr.write('boom'); print('partial'); sys.exit(7)"
    )
    with pytest.raises(NonZeroExit) as exc_info:
        await ProcessExecutor().execute(program, args)
    assert exc_info.value.returncode == 7
    assert exc_info.value.stderr == "boom"
    assert "failed with code 7: boom" in str(exc_info.value)


async def test_execute_missing_program(tmp_path: Path):
    missing = str(tmp_path / "no-such-cli")
    with pytest.raises(SpawnFailure) as exc_info:
        await ProcessExecutor().execute(missing)
    assert exc_info.value.program == missing
    assert "No such file" in exc_info.value.reason


async def test_execute_program_not_executable(tmp_path: Path):
    script = tmp_path / "not-executable"
    script.write_text("#!/bin/sh\necho hi\n")
    script.chmod(0o644)
    with pytest.raises(SpawnFailure) as exc_info:
        await ProcessExecutor().execute(str(script))
    assert "Permission denied" in exc_info.value.reason


async def test_execute_timeout_kills_child(spawned: list[asyncio.subprocess.Process]):
    program, args = python_args("import time; time.sleep(30)")
    executor = ProcessExecutor()

    started = time.monotonic()
    with pytest.raises(ExecutionTimeout) as exc_info:
        await executor.execute(program, args, timeout=timedelta(seconds=0.5))
    elapsed = time.monotonic() - started

    assert elapsed < 10
    assert exc_info.value.timeout == timedelta(seconds=0.5)
    assert "timed out after 0.5s" in str(exc_info.value)
    assert len(spawned) == 1
    assert spawned[0].returncode == -signal.SIGKILL
    assert not executor.running


async def test_execute_without_timeout_waits_for_exit():
    program, args = python_args("import time; time.sleep(0.3); print('late')")
    result = await ProcessExecutor().execute(program, args, timeout=None)
    assert result.text == "late"


async def test_execute_finishes_within_timeout():
    program, args = python_args("print('in time')")
    result = await ProcessExecutor().execute(
        program, args, timeout=timedelta(seconds=30)
    )
    assert result.text == "in time"


async def test_timeout_kill_after_exit_is_harmless(
    spawned: list[asyncio.subprocess.Process],
):
    program, args = python_args("import time; time.sleep(30)")
    executor = ProcessExecutor()

    with pytest.raises(ExecutionTimeout):
        await executor.execute(program, args, timeout=timedelta(seconds=0.2))

    [proc] = spawned
    assert proc.returncode == -signal.SIGKILL
    RunningProcess(proc).kill()


async def test_execute_cancelled_kills_child(spawned: list[asyncio.subprocess.Process]):
    program, args = python_args("import time; time.sleep(30)")
    executor = ProcessExecutor()

    task = asyncio.create_task(executor.execute(program, args))
    await _wait_until_running(executor)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    await asyncio.wait_for(spawned[0].wait(), timeout=5)
    assert spawned[0].returncode == -signal.SIGKILL
    assert not executor.running


async def test_kill_all_kills_in_flight_children():
    program, args = python_args("import time; time.sleep(30)")
    executor = ProcessExecutor()

    task = asyncio.create_task(executor.execute(program, args))
    await _wait_until_running(executor)

    assert executor.kill_all() == 1
    with pytest.raises(NonZeroExit) as exc_info:
        await asyncio.wait_for(task, timeout=5)
    assert exc_info.value.returncode == -signal.SIGKILL
    assert not executor.running


def test_kill_all_with_nothing_running():
    assert ProcessExecutor().kill_all() == 0


async def test_concurrent_calls_are_isolated():
    executor = ProcessExecutor()
    program, args = python_args("import sys; print(sys.stdin.read())")

    results = await asyncio.gather(
        *(executor.execute(program, args, input_text=f"call-{i}") for i in range(5))
    )

    assert [r.text for r in results] == [f"call-{i}" for i in range(5)]


async def test_execute_stub_program(make_program: MakeProgram):
    stub = make_program("claude", "import sys\nsys.stdin.read()\nprint('OK')")
    result = await ProcessExecutor().execute(str(stub), ["--print"], input_text="hi")
    assert result.text == "OK"
