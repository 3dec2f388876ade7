from __future__ import annotations

from typing import Callable, Iterator, List, Optional

from pydantic import BaseModel

from stacksync.cli.formatter import OutputFormatter
from stacksync.core.session import SyncSession
from stacksync.runtime.compose import ComposeStack
from stacksync.runtime.initial_sync import InitialSync
from stacksync.runtime.notify import Notifier
from stacksync.runtime.ports import PortResolver
from stacksync.runtime.shell import CommandRunner, run_command
from stacksync.runtime.sync_engine import build_endpoint
from stacksync.runtime.sync_log import tail_log
from stacksync.runtime.watcher import WatcherHandle, WatcherProbe
from stacksync.utils.diagnostics import WatcherError

ConfirmPrompt = Callable[[str], Optional[str]]


def is_affirmative(answer: Optional[str]) -> bool:
    """Only 'y' or 'yes' (any case) count as consent."""
    if answer is None:
        return False
    return answer.strip().lower() in {"y", "yes"}


class SessionStatus(BaseModel):
    """Read-only snapshot of a sync root for the `status` action."""

    root: str
    initialized: bool
    watcher: WatcherProbe
    port: Optional[int] = None


class LifecycleCoordinator:
    """
    Moves a sync root and its stack between uninitialized, stopped, running
    and destroyed.

    Each public action runs its steps strictly in order and returns whether it
    ended in the intended state. Collaborator failures become a failure line
    plus a notification; only InitialSync's StackStartError escapes.
    Two coordinators acting on the same root at once is unsupported.
    """

    def __init__(
        self,
        session: SyncSession,
        compose: ComposeStack,
        ports: PortResolver,
        watcher: WatcherHandle,
        initial_sync: InitialSync,
        notifier: Notifier,
        prompt: Optional[ConfirmPrompt] = None,
    ) -> None:
        self.session = session
        self.compose = compose
        self.ports = ports
        self.watcher = watcher
        self.initial_sync = initial_sync
        self.notifier = notifier
        self._prompt = prompt

    @classmethod
    def for_session(
        cls,
        session: SyncSession,
        prompt: Optional[ConfirmPrompt] = None,
        runner: CommandRunner = run_command,
    ) -> "LifecycleCoordinator":
        """Wire the default collaborators for `session`."""
        compose = ComposeStack(session, runner=runner)
        ports = PortResolver(session, compose, runner=runner)
        watcher = WatcherHandle(session)
        notifier = Notifier(
            enabled=session.settings.notifications,
            title=session.settings.notify_title,
        )
        initial_sync = InitialSync(session, compose, ports, watcher, notifier, runner=runner)
        return cls(session, compose, ports, watcher, initial_sync, notifier, prompt=prompt)

    # Outcome reporting

    def _succeed(self, message: str) -> bool:
        OutputFormatter.log(message, severity="success")
        self.notifier.send(message)
        return True

    def _fail(self, message: str) -> bool:
        OutputFormatter.log(message, severity="failure")
        self.notifier.send(message)
        return False

    def _confirmed(self, question: str, quiet: bool) -> bool:
        if quiet:
            return True
        answer = self._prompt(question) if self._prompt is not None else None
        if is_affirmative(answer):
            return True
        OutputFormatter.log("Aborted. Nothing was changed.", severity="info")
        return False

    def manual_recovery_hint(self) -> List[str]:
        engine = self.session.sync.engine
        compose_stop = " ".join([*self.compose.base_args(), "stop"])
        return [
            "No watcher record was found, so stacksync cannot tell what to stop.",
            f"If a watcher is still running, find it with `pgrep -fl {engine}` and kill it.",
            f"Stop the stack by hand with `{compose_stop}`.",
            "Then run `stacksync start` to bring both back up.",
        ]

    def _start_watcher(self, label: str) -> bool:
        port = self.ports.resolve()
        endpoint = build_endpoint(self.session.sync.host, port)
        if endpoint is None:
            return self._fail(
                f"{label}, but the sync container is unreachable: no host port is mapped to "
                f"{self.session.sync.port}/tcp."
            )

        try:
            record = self.watcher.start(endpoint)
        except WatcherError as exc:
            return self._fail(f"{label}, but the watcher did not start: {exc}")

        OutputFormatter.log(f"Watcher pid={record.pid} syncing with {endpoint}", severity="debug")
        return self._succeed(f"{label}. Sync running on port {port}.")

    # Actions

    def start(self) -> bool:
        """Bring the stack up and the watcher with it, running the initial sync first if needed."""
        self.session.clear_log()
        if not self.session.is_initialized():
            if not self._run_initial_sync():
                return False
        return self._bring_up()

    def _run_initial_sync(self) -> bool:
        result = self.initial_sync.run()
        if not result.succeeded:
            return self._fail("Initial sync failed; watcher not started. Check the sync log, then run `stacksync start` to retry.")
        return True

    def _bring_up(self) -> bool:
        if self.watcher.stop():
            OutputFormatter.log("Stopped a previously recorded watcher.", severity="info")

        stop_result = self.compose.stop()
        if not stop_result.succeeded:
            OutputFormatter.log(f"Stack stop reported: {stop_result.summary()}", severity="warning")

        up_result = self.compose.up(force_recreate=True)
        if not up_result.succeeded:
            return self._fail(f"Stack failed to start: {up_result.summary()}")

        return self._start_watcher("Stack started")

    def restart(self) -> bool:
        """Restart the existing stack and the watcher."""
        self.watcher.stop()
        self.session.clear_log()

        restart_result = self.compose.restart()
        if not restart_result.succeeded:
            return self._fail(f"Stack restart failed: {restart_result.summary()}")

        return self._start_watcher("Stack restarted")

    def stop(self) -> bool:
        """Stop the watcher and the stack. Without a watcher record nothing is touched."""
        if not self.watcher.exists():
            OutputFormatter.log("Nothing to stop: no watcher record found.", severity="failure")
            for line in self.manual_recovery_hint():
                OutputFormatter.log(line, severity="warning")
            self.notifier.send("Nothing to stop: no watcher record found.")
            return False

        self.watcher.stop()
        stop_result = self.compose.stop()
        self.session.clear_log()

        if not stop_result.succeeded:
            return self._fail(f"Watcher stopped, but the stack did not stop: {stop_result.summary()}")
        return self._succeed("Sync and stack stopped.")

    def reset(self, quiet: bool = False) -> bool:
        """Forget the initial sync, redo it, then start."""
        question = (
            f"Reset will tear down the stack and redo the initial sync of {self.session.root}. "
            "Continue? [y/N]"
        )
        if not self._confirmed(question, quiet):
            return False

        self.session.clear_marker()
        self.session.clear_log()
        if not self._run_initial_sync():
            return False
        return self._bring_up()

    def destroy(self, quiet: bool = False) -> bool:
        """Stop the watcher, remove the stack with its volumes, and forget the initial sync."""
        question = (
            "Destroy will remove the stack's containers and volumes and forget the initial sync. "
            "Continue? [y/N]"
        )
        if not self._confirmed(question, quiet):
            return False

        if not self.watcher.stop():
            OutputFormatter.log("No watcher was recorded.", severity="info")

        down_result = self.compose.down(remove_volumes=True)
        self.session.clear_marker()

        if not down_result.succeeded:
            return self._fail(f"Stack teardown failed: {down_result.summary()}")
        return self._succeed("Stack destroyed.")

    def logs(self, follow: bool = True, lines: int = 20) -> Iterator[str]:
        """Lines of the sync log; follows new output when `follow` is set."""
        if not self.session.log_path.exists():
            OutputFormatter.log(f"No sync log yet at {self.session.log_path}.", severity="info")
            if not follow:
                return iter(())
        return tail_log(self.session.log_path, lines=lines, follow=follow)

    def status(self) -> SessionStatus:
        return SessionStatus(
            root=str(self.session.root),
            initialized=self.session.is_initialized(),
            watcher=self.watcher.probe(),
            port=self.ports.resolve(),
        )
