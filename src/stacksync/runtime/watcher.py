from __future__ import annotations

import json
import os
import signal
import subprocess
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from stacksync.core.session import SyncSession
from stacksync.runtime.sync_engine import SyncMode, build_sync_command
from stacksync.utils.diagnostics import WatcherError


class WatcherState(str, Enum):
    """Classification of the watcher record against the live process table."""

    ABSENT = "absent"
    RUNNING = "running"
    STALE = "stale"


class WatcherRecord(BaseModel):
    """Persisted handle of the background watcher."""

    pid: int = Field(gt=0)
    endpoint: str = ""
    started_at: str = ""


class WatcherProbe(BaseModel):
    """Result payload from probing the watcher record."""

    state: WatcherState
    record: Optional[WatcherRecord] = None
    reason: str


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def is_process_alive(pid: int) -> bool:
    """Return True when a process id appears to be alive on this host."""
    if pid <= 0:
        return False

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False

    return True


class WatcherHandle:
    """
    Owns the one background sync-watch process of a sync root.

    The pid file is the only evidence that a watcher runs. start() writes it,
    stop() deletes it before signalling, and liveness is never checked on the
    way: a record may outlive its process.
    """

    def __init__(
        self,
        session: SyncSession,
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
        kill: Callable[[int, int], None] = os.kill,
    ) -> None:
        self.session = session
        self._spawn = spawn
        self._kill = kill

    def exists(self) -> bool:
        return self.session.pid_path.exists()

    def read_record(self) -> Optional[WatcherRecord]:
        """Return the persisted record, or None when it is missing or unreadable."""
        pid_file = self.session.pid_path
        if not pid_file.exists():
            return None
        try:
            payload = json.loads(pid_file.read_text(encoding="utf-8"))
            return WatcherRecord.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError):
            return None

    def start(self, endpoint: str, ignore_rules: Optional[List[str]] = None) -> WatcherRecord:
        """Spawn the sync engine in watch mode, detached, logging to the sync log."""
        if self.exists():
            raise WatcherError(
                f"A watcher record already exists at {self.session.pid_path}; stop it first."
            )

        rules = self.session.sync.ignore if ignore_rules is None else ignore_rules
        command = build_sync_command(self.session, endpoint, rules, SyncMode.WATCH)

        log_path = self.session.log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with log_path.open("ab") as log_file:
                process = self._spawn(
                    command,
                    cwd=self.session.root,
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
        except OSError as exc:
            raise WatcherError(f"Could not start '{command[0]}': {exc}") from exc

        record = WatcherRecord(pid=process.pid, endpoint=endpoint, started_at=utc_now_iso())
        self.session.pid_path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        return record

    def stop(self) -> bool:
        """Stop the recorded watcher. Returns False when there was nothing to stop."""
        pid_file = self.session.pid_path
        if not pid_file.exists():
            return False

        record = self.read_record()
        pid_file.unlink(missing_ok=True)

        if record is None:
            return True

        try:
            self._kill(record.pid, signal.SIGTERM)
        except OSError:
            # Already gone (ProcessLookupError) or not ours to signal.
            pass

        return True

    def probe(self) -> WatcherProbe:
        """Classify the watcher record as absent, running, or stale."""
        if not self.exists():
            return WatcherProbe(state=WatcherState.ABSENT, reason="No watcher record found.")

        record = self.read_record()
        if record is None:
            return WatcherProbe(state=WatcherState.STALE, reason="Watcher record is unreadable.")

        if not is_process_alive(record.pid):
            return WatcherProbe(
                state=WatcherState.STALE,
                record=record,
                reason=f"Watcher process pid={record.pid} is not alive.",
            )

        return WatcherProbe(
            state=WatcherState.RUNNING,
            record=record,
            reason=f"Watcher process pid={record.pid} is alive.",
        )
