"""Error taxonomy shared by the executor, the dispatcher and the server."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta


class BridgeError(Exception):
    """Base class for every failure a tool call can end in."""


class ExecutionError(BridgeError):
    """The external program could not produce a usable result."""

    def __init__(self, program: str, message: str) -> None:
        super().__init__(message)
        self.program = program


class SpawnFailure(ExecutionError):
    """The external program could not be launched at all."""

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(program, f"Failed to start {program}: {reason}")
        self.reason = reason


class ExecutionTimeout(ExecutionError):
    """The external program outlived its deadline and was killed."""

    def __init__(self, program: str, timeout: timedelta) -> None:
        super().__init__(
            program,
            f"{program} execution timed out after {timeout.total_seconds():g}s",
        )
        self.timeout = timeout


class NonZeroExit(ExecutionError):
    """The external program ran but reported failure."""

    def __init__(self, program: str, returncode: int, stderr: str) -> None:
        super().__init__(program, f"{program} failed with code {returncode}: {stderr}")
        self.returncode = returncode
        self.stderr = stderr


class DispatchError(BridgeError):
    """The tool call was rejected before anything was executed."""


class UnknownTool(DispatchError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArguments(DispatchError):
    """Arguments did not match the tool's schema.

    ``violations`` holds one ``"field: problem"`` entry per failed constraint.
    """

    def __init__(self, tool: str, violations: Sequence[str]) -> None:
        super().__init__(f"Invalid arguments for {tool}: " + "; ".join(violations))
        self.tool = tool
        self.violations = list(violations)


class ToolCallFailed(Exception):
    """The single error surfaced to an MCP caller when a tool call fails."""
