"""Centralized logging configuration for the bridge servers."""

import logging
import sys
from typing import Final

from cli_bridge.environment import get_log_level

# stdout carries the MCP transport, so every log line goes to stderr
_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Packages that should have their minimum logging level set to INFO
_VERBOSE_PACKAGES: Final[set[str]] = {
    "mcp",  # logs every JSON-RPC message at DEBUG
    "httpx",
    "httpcore",
}


def configure_logging() -> None:
    """Configure logging based on CLI_BRIDGE_LOG_LEVEL environment variable.

    Sets the global logging level from CLI_BRIDGE_LOG_LEVEL (default: INFO).
    Forces verbose packages to log at INFO minimum level.
    """
    try:
        level = get_log_level("LOG_LEVEL", logging.INFO)
    except ValueError:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        log = logging.getLogger(__name__)
        log.exception("Failed to configure logging")
        raise

    logging.basicConfig(level=level, format=_FORMAT, stream=sys.stderr)

    for package in _VERBOSE_PACKAGES:
        logger = logging.getLogger(package)
        logger.setLevel(max(level, logging.INFO))

    log = logging.getLogger(__name__)
    log.debug("Logging configured at level %s", logging.getLevelName(level))
