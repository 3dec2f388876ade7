from __future__ import annotations

import time
from typing import Callable, NoReturn

from stacksync.cli.formatter import OutputFormatter, format_elapsed
from stacksync.core.session import SyncSession
from stacksync.runtime.compose import ComposeStack
from stacksync.runtime.notify import Notifier
from stacksync.runtime.ports import PortResolver
from stacksync.runtime.shell import CommandRunner, run_command
from stacksync.runtime.sync_engine import SyncMode, build_endpoint, build_sync_command
from stacksync.runtime.watcher import WatcherHandle, utc_now_iso
from stacksync.utils.diagnostics import CommandResult, StackStartError


class InitialSync:
    """
    One-shot foreground sync that opens an epoch.

    The stack is torn down and brought up fresh first so no half-running
    previous stack holds ports or volumes. A stack that does not come up is
    fatal: StackStartError propagates to the command surface.
    """

    def __init__(
        self,
        session: SyncSession,
        compose: ComposeStack,
        ports: PortResolver,
        watcher: WatcherHandle,
        notifier: Notifier,
        runner: CommandRunner = run_command,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session = session
        self.compose = compose
        self.ports = ports
        self.watcher = watcher
        self.notifier = notifier
        self._runner = runner
        self._clock = clock

    def _abort(self, message: str, diagnostic: str = "") -> NoReturn:
        OutputFormatter.log(message, severity="failure")
        if diagnostic:
            OutputFormatter.log(diagnostic, severity="error")
        self.notifier.send(f"{message} {diagnostic}".strip())
        raise StackStartError(message, diagnostic)

    def run(self) -> CommandResult:
        """Run the initial sync; the marker is only written when the sync engine succeeds."""
        OutputFormatter.log("Running initial sync. This can take a while on large trees.", severity="info")

        if self.watcher.stop():
            OutputFormatter.log("Stopped the running watcher before the initial sync.", severity="info")

        down_result = self.compose.down()
        if not down_result.succeeded:
            OutputFormatter.log(f"Stack teardown reported: {down_result.summary()}", severity="warning")

        up_result = self.compose.up()
        if not up_result.succeeded:
            self._abort("Stack failed to start for the initial sync.", up_result.summary())

        port = self.ports.resolve()
        endpoint = build_endpoint(self.session.sync.host, port)
        if endpoint is None:
            self._abort(
                "Sync container is unreachable: no host port is mapped to "
                f"{self.session.sync.port}/tcp on a container matching '{self.session.sync.container_pattern}'."
            )

        command = build_sync_command(
            self.session,
            endpoint,
            self.session.sync.initial_ignore_rules(),
            SyncMode.ONCE,
        )
        OutputFormatter.log(f"Syncing {self.session.root} with {endpoint}", severity="debug")

        started = self._clock()
        result = self._runner(command, cwd=self.session.root, log_path=self.session.log_path)
        elapsed = format_elapsed(self._clock() - started)

        if result.succeeded:
            self.session.marker_path.write_text(f"{utc_now_iso()}\n", encoding="utf-8")
            OutputFormatter.log(f"Initial sync finished in {elapsed}.", severity="success")
            self.notifier.send(f"Initial sync finished in {elapsed}.")
        else:
            OutputFormatter.log(
                f"Initial sync failed after {elapsed} ({result.summary()}).",
                severity="failure",
            )
            self.notifier.send(f"Initial sync failed after {elapsed}.")

        return result
