from __future__ import annotations

from typing import List

from stacksync.core.session import SyncSession
from stacksync.runtime.shell import CommandRunner, run_command
from stacksync.utils.diagnostics import CommandResult


class ComposeStack:
    """Control surface over the Compose stack declared by the session's files."""

    def __init__(self, session: SyncSession, runner: CommandRunner = run_command) -> None:
        self.session = session
        self._runner = runner

    def base_args(self) -> List[str]:
        settings = self.session.compose
        args = list(settings.command)
        for compose_file in settings.files:
            args.extend(["-f", compose_file])
        if settings.project_name:
            args.extend(["-p", settings.project_name])
        return args

    def _run(self, *verb: str) -> CommandResult:
        return self._runner([*self.base_args(), *verb], cwd=self.session.root)

    def up(self, force_recreate: bool = False) -> CommandResult:
        """Start the stack detached."""
        if force_recreate:
            return self._run("up", "-d", "--force-recreate")
        return self._run("up", "-d")

    def down(self, remove_volumes: bool = False) -> CommandResult:
        """Remove the stack's containers (and volumes when asked)."""
        if remove_volumes:
            return self._run("down", "-v", "--remove-orphans")
        return self._run("down", "--remove-orphans")

    def stop(self) -> CommandResult:
        return self._run("stop")

    def restart(self) -> CommandResult:
        return self._run("restart")

    def config(self) -> CommandResult:
        """Merged configuration of all stack files, as YAML on stdout."""
        return self._run("config")

    def container_id(self, service: str) -> CommandResult:
        """Id of the running container for `service`; empty output when none runs."""
        return self._run("ps", "-q", service)
