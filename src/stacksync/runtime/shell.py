from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from stacksync.utils.diagnostics import CommandResult

CommandRunner = Callable[..., CommandResult]


def run_command(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    log_path: Optional[Path] = None,
) -> CommandResult:
    """Run an external tool to completion and describe how it went.

    With `log_path`, combined stdout/stderr is appended to that file instead of
    being captured. A missing executable yields a failed result, not an error.
    """
    command = [str(arg) for arg in args]
    try:
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with log_path.open("ab") as log_file:
                completed = subprocess.run(
                    command,
                    cwd=cwd,
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
            output = ""
            diagnostic = "" if completed.returncode == 0 else f"see {log_path} for details"
        else:
            completed = subprocess.run(
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
            )
            output = completed.stdout or ""
            diagnostic = (completed.stderr or "").strip()
    except OSError as exc:
        return CommandResult(
            args=command,
            succeeded=False,
            returncode=None,
            diagnostic=f"Could not run '{command[0]}': {exc}",
        )

    return CommandResult(
        args=command,
        succeeded=completed.returncode == 0,
        returncode=completed.returncode,
        output=output,
        diagnostic=diagnostic,
    )
