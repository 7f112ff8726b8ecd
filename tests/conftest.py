"""Shared test fixtures for the bridge servers."""

import stat
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import pytest

from cli_bridge.config import BridgeConfig, PromptDelivery
from cli_bridge.errors import BridgeError
from cli_bridge.executor import ExecutionResult, ProcessExecutor
from cli_bridge.tools import ToolCatalog

MakeProgram = Callable[[str, str], Path]


@pytest.fixture()
def make_program(tmp_path: Path) -> MakeProgram:
    """Write an executable Python script to stand in for an external CLI."""

    def _make(name: str, body: str) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        path = bin_dir / name
        path.write_text(f"#!{sys.executable}\n{body}\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


def python_args(code: str) -> tuple[str, list[str]]:
    """(program, args) that run ``code`` with the current interpreter."""
    return sys.executable, ["-c", code]


@dataclass
class Call:
    program: str
    args: list[str]
    input_text: str | None
    timeout: timedelta | None


class RecordingExecutor(ProcessExecutor):
    """Executor double that records calls instead of spawning anything."""

    def __init__(
        self,
        output: str = "OK",
        *,
        error: BridgeError | None = None,
        empty_output_placeholder: str | None = None,
    ) -> None:
        super().__init__(empty_output_placeholder=empty_output_placeholder)
        self.output = output
        self.error = error
        self.calls: list[Call] = []

    async def execute(
        self,
        program: str,
        args: Sequence[str] = (),
        input_text: str | None = None,
        timeout: timedelta | None = None,
    ) -> ExecutionResult:
        self.calls.append(Call(program, list(args), input_text, timeout))
        if self.error:
            raise self.error
        text = self.output.strip() or self.empty_output_placeholder or ""
        return ExecutionResult(text=text, stdout=self.output, stderr="", returncode=0)


@pytest.fixture()
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture()
def echo_catalog() -> ToolCatalog:
    catalog = ToolCatalog()

    @catalog.tool(heading="## Echo: {word}")
    def echo(*, word: str, times: int = 1, loud: bool = False) -> str:
        """Repeat a word.

        word: the word to repeat
        times: how many times
        loud: shout it
        """
        text = " ".join([word] * times)
        return text.upper() if loud else text

    return catalog


@pytest.fixture()
def echo_config(echo_catalog: ToolCatalog) -> BridgeConfig:
    return BridgeConfig(
        name="echo-bridge",
        title="Echo Bridge Server",
        summary="Echoes prompts.",
        program="echo-cli",
        program_args=("--print",),
        delivery=PromptDelivery.STDIN,
        timeout=timedelta(seconds=5),
        catalog=echo_catalog,
    )
