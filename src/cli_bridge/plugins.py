"""Bridge discovery via the cli_bridge.bridges entry point group."""

import logging
import os
from importlib.metadata import EntryPoint, entry_points

from cli_bridge.config import BridgeConfig

log = logging.getLogger(__name__)

GROUP = "cli_bridge.bridges"


def available_bridges() -> list[str]:
    return sorted(ep.name for ep in entry_points(group=GROUP))


def discover_one(name: str | None = None) -> EntryPoint | None:
    """Find the entry point for a bridge.

    With a name, returns that bridge or raises RuntimeError listing the
    installed ones. Without a name, a single installed bridge is
    auto-selected; if several are installed, ``CLI_BRIDGE_BRIDGE`` must name
    which one to use. Returns ``None`` when no bridges are installed.
    """
    eps = list(entry_points(group=GROUP))

    if not eps:
        return None

    if name is None and len(eps) == 1:
        return eps[0]

    selected = name or os.environ.get("CLI_BRIDGE_BRIDGE")
    if selected:
        for ep in eps:
            if ep.name == selected:
                return ep

    names = ", ".join(sorted(ep.name for ep in eps))
    if selected:
        raise RuntimeError(f"Unknown bridge {selected!r} (installed: {names})")
    raise RuntimeError(
        f"Multiple bridges installed ({names}). "
        "Pass one by name or set CLI_BRIDGE_BRIDGE."
    )


def load_bridge(name: str | None = None) -> BridgeConfig:
    """Load a bridge module and build its configuration."""
    ep = discover_one(name)
    if ep is None:
        raise RuntimeError(f"No bridges installed in the {GROUP} group")
    log.debug("Loading bridge %s from %s", ep.name, ep.value)
    module = ep.load()
    return module.create_bridge()
