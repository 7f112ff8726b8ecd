"""MCP server wiring and the bridge server lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import timedelta
from typing import Any

from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from cli_bridge.config import BridgeConfig
from cli_bridge.dispatcher import Dispatcher
from cli_bridge.errors import BridgeError, ToolCallFailed
from cli_bridge.executor import ProcessExecutor

log = logging.getLogger(__name__)

Transport = Callable[[], AbstractAsyncContextManager[tuple[Any, Any]]]

# how long shutdown waits for the transport to close before abandoning it
SHUTDOWN_GRACE = timedelta(seconds=2)


def create_mcp_server(dispatcher: Dispatcher, name: str, version: str) -> Server:
    """Build an MCP Server backed by a Dispatcher.

    The returned Server has list_tools and call_tool handlers that delegate
    to the dispatcher.  The caller is responsible for running it with a transport.
    """
    server = Server(name, version=version)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.input_schema,
            )
            for spec in dispatcher.list_tools()
        ]

    # the dispatcher validates arguments itself so callers see its messages
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        try:
            response = await dispatcher.call_tool(name, arguments)
        except BridgeError as e:
            log.warning("Tool %s failed: %s", name, e)
            raise ToolCallFailed(f"Tool execution failed: {e}") from e
        except Exception as e:
            log.exception("Unexpected error in tool %s", name)
            raise ToolCallFailed(
                f"Tool execution failed: internal error in {name}"
            ) from e
        return response.content

    return server


class BridgeServer:
    """One bridge served over a transport, with an explicit lifecycle.

    ``start`` serves until the transport closes or ``shutdown`` is called.
    Signal handling is left to whoever hosts the server.
    """

    def __init__(
        self,
        config: BridgeConfig,
        executor: ProcessExecutor | None = None,
        *,
        transport: Transport = stdio_server,
        shutdown_grace: timedelta = SHUTDOWN_GRACE,
    ) -> None:
        self.config = config
        self.dispatcher = Dispatcher(config, executor)
        self.mcp = create_mcp_server(self.dispatcher, config.name, config.version)
        self.shutdown_grace = shutdown_grace
        self._transport = transport
        self._serving: asyncio.Task[None] | None = None
        self._stopping = False
        self._stop_requested = asyncio.Event()

    @property
    def executor(self) -> ProcessExecutor:
        return self.dispatcher.executor

    async def start(self) -> bool:
        """Serve until the transport closes or ``shutdown`` is called.

        Returns False when, after ``shutdown``, the transport did not close
        within ``shutdown_grace``. The stdio transport reads stdin on a worker
        thread that cannot be interrupted, so the caller then has to exit the
        process without waiting for that thread.
        """
        if self._serving is not None:
            raise RuntimeError(f"{self.config.name} is already running")
        if self._stopping:
            return True
        if self.config.timeout is None:
            log.warning(
                "%s has no timeout configured; a hung %s will run until shutdown",
                self.config.name,
                self.config.program,
            )
        serving = self._serving = asyncio.create_task(self._serve())
        stop_requested = asyncio.create_task(self._stop_requested.wait())
        try:
            await asyncio.wait(
                {serving, stop_requested}, return_when=asyncio.FIRST_COMPLETED
            )
            if not serving.done():
                await asyncio.wait(
                    {serving}, timeout=self.shutdown_grace.total_seconds()
                )
        except asyncio.CancelledError:
            serving.cancel()
            raise
        finally:
            stop_requested.cancel()
            self.executor.kill_all()

        if not serving.done():
            log.warning(
                "%s transport did not close within %gs of shutdown",
                self.config.title,
                self.shutdown_grace.total_seconds(),
            )
            return False
        if not serving.cancelled():
            serving.result()
        log.info("%s stopped", self.config.title)
        return True

    async def _serve(self) -> None:
        async with self._transport() as (read_stream, write_stream):
            log.info("%s started", self.config.title)
            await self.mcp.run(
                read_stream,
                write_stream,
                self.mcp.create_initialization_options(),
            )

    def shutdown(self) -> None:
        """Stop serving and kill any child processes still running."""
        if self._stopping:
            return
        self._stopping = True
        log.info("Shutting down %s", self.config.title)
        self.executor.kill_all()
        self._stop_requested.set()
        if self._serving is not None and not self._serving.done():
            self._serving.cancel()
