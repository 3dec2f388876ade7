from __future__ import annotations

import re
from typing import Any, Dict, Optional

import yaml

from stacksync.core.session import SyncSession
from stacksync.runtime.compose import ComposeStack
from stacksync.runtime.shell import CommandRunner, run_command


def find_sync_container(config_text: str, pattern: str) -> Optional[Dict[str, str]]:
    """Locate the sync-target service in merged compose config output.

    Returns {"service": ..., "container_name": ...} for the first service whose
    container_name (or service name, when no container_name is set) matches
    `pattern`. container_name is "" when the service does not declare one.
    """
    try:
        payload = yaml.safe_load(config_text) or {}
    except yaml.YAMLError:
        return None

    if not isinstance(payload, dict):
        return None

    services: Any = payload.get("services") or {}
    if not isinstance(services, dict):
        return None

    matcher = re.compile(pattern)
    for service_name, definition in services.items():
        container_name = ""
        if isinstance(definition, dict):
            container_name = str(definition.get("container_name") or "")
        identity = container_name or str(service_name)
        if matcher.search(identity):
            return {"service": str(service_name), "container_name": container_name}

    return None


def parse_port_mapping(output: str) -> Optional[int]:
    """Parse `docker port` output such as '0.0.0.0:49153' or '[::]:49153'."""
    for line in output.splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        candidate = line.rsplit(":", 1)[1]
        if candidate.isdigit():
            port = int(candidate)
            if 1 <= port <= 65535:
                return port
    return None


class PortResolver:
    """
    Finds the host port the container runtime mapped to the sync service.

    Every call queries the live stack; the mapping changes whenever the
    container is recreated.
    """

    def __init__(
        self,
        session: SyncSession,
        compose: ComposeStack,
        runner: CommandRunner = run_command,
    ) -> None:
        self.session = session
        self.compose = compose
        self._runner = runner

    def resolve(self) -> Optional[int]:
        """Return the mapped host port, or None when the sync container is unreachable."""
        config_result = self.compose.config()
        if not config_result.succeeded:
            return None

        target = find_sync_container(config_result.output, self.session.sync.container_pattern)
        if target is None:
            return None

        container = target["container_name"]
        if not container:
            id_result = self.compose.container_id(target["service"])
            if not id_result.succeeded:
                return None
            ids = id_result.output.split()
            if not ids:
                return None
            container = ids[0]

        sync = self.session.sync
        port_result = self._runner(
            [*sync.container_command, "port", container, f"{sync.port}/tcp"],
            cwd=self.session.root,
        )
        if not port_result.succeeded:
            return None
        return parse_port_mapping(port_result.output)
