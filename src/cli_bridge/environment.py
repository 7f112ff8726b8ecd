"""Typed environment variable helpers with CLI_BRIDGE_ prefix."""

import logging
import os
import re
from datetime import timedelta
from typing import overload

_PREFIX = "CLI_BRIDGE_"
_MISSING = object()


@overload
def get_str(name: str) -> str: ...


@overload
def get_str(name: str, default: str) -> str: ...


def get_str(name: str, default: object = _MISSING) -> str:
    """Read CLI_BRIDGE_{name} as a string.

    With no default, raises KeyError if the variable is unset.
    With a default, returns the default when unset.
    """
    key = f"{_PREFIX}{name}"
    if default is _MISSING:
        return os.environ[key]
    return os.environ.get(key, default)  # type: ignore[arg-type]


def get_timedelta(name: str, default: timedelta) -> timedelta:
    """Read CLI_BRIDGE_{name} as a timedelta.

    Accepts either integer seconds (e.g. "280") or an ISO 8601 duration
    string (e.g. "PT4M40S", "PT1H").
    """
    value = get_optional_timedelta(name)
    return default if value is None else value


def get_optional_timedelta(name: str) -> timedelta | None:
    """Read CLI_BRIDGE_{name} as a timedelta, or None when unset or empty."""
    raw = os.environ.get(f"{_PREFIX}{name}")
    if not raw:
        return None
    if raw.startswith("P"):
        return _parse_iso8601_duration(raw)
    return timedelta(seconds=int(raw))


def get_log_level(name: str, default: int) -> int:
    """Read CLI_BRIDGE_{name} as a logging level name (DEBUG, INFO, ...)."""
    raw = os.environ.get(f"{_PREFIX}{name}")
    if raw is None:
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ValueError(f"Invalid log level: {raw}")
    return level


_ISO_DURATION = re.compile(
    r"^P"
    r"(?:(\d+)D)?"
    r"(?:T"
    r"(?:(\d+)H)?"
    r"(?:(\d+)M)?"
    r"(?:(\d+)S)?"
    r")?$"
)


def _parse_iso8601_duration(value: str) -> timedelta:
    """Parse a subset of ISO 8601 durations into a timedelta."""
    m = _ISO_DURATION.match(value)
    if not m:
        raise ValueError(f"Cannot parse ISO 8601 duration: {value}")
    days = int(m.group(1) or 0)
    hours = int(m.group(2) or 0)
    minutes = int(m.group(3) or 0)
    seconds = int(m.group(4) or 0)
    return timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)
