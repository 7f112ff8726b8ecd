"""Bounded execution of external command-line programs."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta

from cli_bridge.errors import ExecutionTimeout, NonZeroExit, SpawnFailure

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Result of an external program that exited successfully.

    ``text`` is the trimmed standard output, or the executor's empty-output
    placeholder when there was none.
    """

    text: str
    stdout: str
    stderr: str
    returncode: int


class RunningProcess:
    """Wrapper around an asyncio subprocess, providing a clean interface."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self._process = process

    @property
    def pid(self) -> int | None:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def communicate(self, input_text: str | None = None) -> tuple[str, str]:
        """Send ``input_text`` (if any), close stdin and collect both streams."""
        data = input_text.encode() if input_text is not None else None
        stdout, stderr = await self._process.communicate(data)
        return (
            (stdout or b"").decode(errors="replace"),
            (stderr or b"").decode(errors="replace"),
        )

    async def wait_for_exit(self) -> int:
        await self._process.wait()
        return self._process.returncode or 0

    def kill(self) -> None:
        with contextlib.suppress(ProcessLookupError):
            self._process.kill()


class ProcessExecutor:
    """Runs one external program per call, with an optional deadline.

    Every call owns its own child process and buffers. The executor only
    remembers which children are still running so that ``kill_all`` can take
    them down when the server shuts down.
    """

    def __init__(self, *, empty_output_placeholder: str | None = None) -> None:
        self.empty_output_placeholder = empty_output_placeholder
        self._running: set[RunningProcess] = set()

    @property
    def running(self) -> frozenset[RunningProcess]:
        return frozenset(self._running)

    async def start(self, program: str, args: Sequence[str] = ()) -> RunningProcess:
        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.warning("Could not start %s: %s", program, e)
            raise SpawnFailure(program, e.strerror or str(e)) from e
        return RunningProcess(process)

    async def execute(
        self,
        program: str,
        args: Sequence[str] = (),
        input_text: str | None = None,
        timeout: timedelta | None = None,
    ) -> ExecutionResult:
        """Run ``program`` to completion and return its output.

        Raises SpawnFailure, ExecutionTimeout or NonZeroExit. The child is
        killed if the deadline passes or the calling task is cancelled.
        """
        running = await self.start(program, args)
        self._running.add(running)
        log.info(
            "%s started, pid=%s, args=%d, stdin=%d chars, timeout=%s",
            program,
            running.pid,
            len(args),
            len(input_text or ""),
            timeout or "none",
        )
        try:
            stdout, stderr = await self._communicate(
                program, running, input_text, timeout
            )
        except BaseException:
            running.kill()
            raise
        finally:
            self._running.discard(running)

        returncode = running.returncode or 0
        log.info(
            "%s exited: code=%s, stdout=%d chars, stderr=%d chars",
            program,
            returncode,
            len(stdout),
            len(stderr),
        )
        if returncode != 0:
            raise NonZeroExit(program, returncode, stderr)

        text = stdout.strip()
        if not text and self.empty_output_placeholder is not None:
            text = self.empty_output_placeholder
        return ExecutionResult(
            text=text, stdout=stdout, stderr=stderr, returncode=returncode
        )

    async def _communicate(
        self,
        program: str,
        running: RunningProcess,
        input_text: str | None,
        timeout: timedelta | None,
    ) -> tuple[str, str]:
        if timeout is None:
            return await running.communicate(input_text)
        try:
            return await asyncio.wait_for(
                running.communicate(input_text), timeout=timeout.total_seconds()
            )
        except TimeoutError:
            log.warning("%s (pid=%s) timed out, killing", program, running.pid)
            running.kill()
            await running.wait_for_exit()
            raise ExecutionTimeout(program, timeout) from None

    def kill_all(self) -> int:
        """Kill every child that is still running. Returns how many were killed."""
        running = list(self._running)
        for proc in running:
            log.info("Killing in-flight child pid=%s", proc.pid)
            proc.kill()
        return len(running)
