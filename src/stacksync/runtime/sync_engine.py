from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from stacksync.core.session import SyncSession


class SyncMode(str, Enum):
    """How the sync engine is run."""

    ONCE = "once"
    WATCH = "watch"


_MODE_FLAGS = {
    SyncMode.ONCE: ["-batch", "-auto", "-silent"],
    SyncMode.WATCH: ["-batch", "-auto", "-repeat", "watch"],
}


def build_endpoint(host: str, port: Optional[int]) -> Optional[str]:
    """Return the socket endpoint for the sync service, or None when no port is mapped."""
    if port is None:
        return None
    return f"socket://{host}:{port}/"


def build_sync_command(
    session: SyncSession,
    endpoint: str,
    ignore_rules: Sequence[str],
    mode: SyncMode,
) -> List[str]:
    """Build the sync engine command line for one run against `endpoint`."""
    command = [session.sync.engine, str(session.root), endpoint]
    command.extend(_MODE_FLAGS[mode])
    command.extend(session.sync.extra_args)
    for rule in ignore_rules:
        command.extend(["-ignore", rule])
    return command
