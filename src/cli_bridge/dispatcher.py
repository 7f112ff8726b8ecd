"""Tool dispatch: catalog lookup, validation, prompting and execution."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mcp.types import TextContent

from cli_bridge.config import BridgeConfig
from cli_bridge.executor import ProcessExecutor
from cli_bridge.tools import ToolSpec

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResponse:
    """The Markdown answer to one successful tool call."""

    text: str

    @property
    def content(self) -> list[TextContent]:
        return [TextContent(type="text", text=self.text)]


class Dispatcher:
    """Routes tool calls for one bridge to its external program."""

    def __init__(
        self, config: BridgeConfig, executor: ProcessExecutor | None = None
    ) -> None:
        self.config = config
        self.executor = executor or ProcessExecutor(
            empty_output_placeholder=config.empty_output_placeholder
        )

    def list_tools(self) -> list[ToolSpec]:
        return self.config.catalog.definitions()

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any] | None
    ) -> ToolResponse:
        """Run one tool call end to end.

        Raises UnknownTool or InvalidArguments before anything is spawned,
        and SpawnFailure, ExecutionTimeout or NonZeroExit from the executor.
        """
        spec = self.config.catalog.get(name)
        validated = spec.validate(arguments)
        prompt = spec.build_prompt(validated)
        log.info("Calling %s: prompt=%d chars", name, len(prompt))
        log.debug("Prompt for %s: %s", name, prompt)

        args, input_text = self.config.command_for(prompt)
        result = await self.executor.execute(
            self.config.program,
            args,
            input_text=input_text,
            timeout=self.config.timeout,
        )
        return ToolResponse(spec.format_response(validated, result.text))
