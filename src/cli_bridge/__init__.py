"""MCP bridge servers that relay tool calls to external coding-assistant CLIs."""

__version__ = "1.0.0"
