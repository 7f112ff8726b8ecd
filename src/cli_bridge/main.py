"""Entry points for the bridge servers: CLI flags, signal wiring and exit codes."""

import argparse
import asyncio
import logging
import os
import signal
import sys
from collections.abc import Callable, Sequence
from typing import NoReturn

from cli_bridge import __version__
from cli_bridge.config import BridgeConfig
from cli_bridge.logging import configure_logging
from cli_bridge.plugins import available_bridges, load_bridge
from cli_bridge.server import BridgeServer

log = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)
_INFO_FLAGS = {"-h", "--help", "--version"}


def build_parser(config: BridgeConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=config.name,
        description=f"{config.title} v{config.version}\n\n{config.summary}",
        epilog=_tools_epilog(config),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=config.version,
        help="show version information and exit",
    )
    return parser


def _tools_epilog(config: BridgeConfig) -> str:
    lines = ["tools:"]
    for spec in config.catalog.definitions():
        lines.append(f"  {spec.name:<28} - {spec.description}")
    return "\n".join(lines)


def build_launcher_parser() -> argparse.ArgumentParser:
    """Parser for ``cli-bridge`` itself, before a bridge has been chosen."""
    parser = argparse.ArgumentParser(
        prog="cli-bridge",
        description=(
            f"CLI Bridge v{__version__}\n\n"
            "Serve one installed bridge over MCP stdio. Run "
            "'cli-bridge NAME --help' for the tools a bridge offers."
        ),
        epilog=_bridges_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "bridge",
        nargs="?",
        help="bridge to serve; defaults to the only one installed, "
        "or to CLI_BRIDGE_BRIDGE",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
        help="show version information and exit",
    )
    return parser


def _bridges_epilog() -> str:
    names = available_bridges()
    if not names:
        return "bridges:\n  (none installed)"
    return "\n".join(["bridges:", *(f"  {name}" for name in names)])


def _exit_now(status: int) -> NoReturn:
    """Exit without joining threads, such as a stdin reader that never returns."""
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(status)


async def serve(server: BridgeServer) -> None:
    """Run the server until its transport closes or SIGINT/SIGTERM arrives."""
    loop = asyncio.get_running_loop()
    for sig in _SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, server.shutdown)
    try:
        closed = await server.start()
    finally:
        for sig in _SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)
    if not closed:
        # asyncio.run would wait on the abandoned transport forever
        _exit_now(0)


def main(config: BridgeConfig, argv: Sequence[str] | None = None) -> int:
    """Parse flags, then serve. Returns the process exit status.

    ``--help`` and ``--version`` exit through argparse without serving.
    """
    parser = build_parser(config)
    _, unknown = parser.parse_known_args(argv)

    try:
        configure_logging()
    except ValueError:
        return 1
    if unknown:
        log.warning("Ignoring unrecognized arguments: %s", " ".join(unknown))

    try:
        asyncio.run(serve(BridgeServer(config)))
    except Exception:
        log.exception("%s failed", config.title)
        return 1
    return 0


def _load(prog: str, factory: Callable[[], BridgeConfig]) -> BridgeConfig:
    try:
        return factory()
    except (RuntimeError, ValueError) as e:
        sys.exit(f"{prog}: {e}")


def run() -> None:
    """``cli-bridge [NAME] [OPTIONS]``: serve an installed bridge by name."""
    argv = sys.argv[1:]
    name = None
    if argv and not argv[0].startswith("-"):
        name, argv = argv[0], argv[1:]
    elif _INFO_FLAGS.intersection(argv):
        build_launcher_parser().parse_known_args(argv)
    config = _load("cli-bridge", lambda: load_bridge(name))
    sys.exit(main(config, argv))


def run_claude() -> None:
    from cli_bridge.bridges import claude

    sys.exit(main(_load("claude-bridge", claude.create_bridge), sys.argv[1:]))


def run_codex() -> None:
    from cli_bridge.bridges import codex

    sys.exit(main(_load("codex-bridge", codex.create_bridge), sys.argv[1:]))


if __name__ == "__main__":
    run()
