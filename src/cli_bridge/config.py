"""Declarative description of one bridge."""

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum

from cli_bridge import __version__
from cli_bridge.tools import ToolCatalog


class PromptDelivery(StrEnum):
    """How the rendered prompt reaches the external program."""

    STDIN = "stdin"
    ARGUMENT = "argument"


@dataclass(frozen=True)
class BridgeConfig:
    """Everything that distinguishes one bridge from another.

    ``timeout`` must be given explicitly; ``None`` lets the external program
    run unbounded.
    """

    name: str
    title: str
    summary: str
    program: str
    program_args: tuple[str, ...]
    delivery: PromptDelivery
    timeout: timedelta | None
    catalog: ToolCatalog
    version: str = __version__
    empty_output_placeholder: str | None = None

    def command_for(self, prompt: str) -> tuple[list[str], str | None]:
        """Return (argv after the program name, stdin text) for a prompt."""
        if self.delivery is PromptDelivery.STDIN:
            return list(self.program_args), prompt
        return [*self.program_args, prompt], None
