"""Desktop notifications for stacksync.

macOS gets an ``osascript`` notification, Linux desktops get ``notify-send``
when it is installed. Everywhere else notifications are dropped. Delivery is
fire-and-forget: nothing here waits for or reports on the notifier process.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from typing import Callable, List, Optional


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_notification_command(
    title: str,
    message: str,
    platform: str = sys.platform,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[List[str]]:
    """Return the command that shows `message` on this platform, if there is one."""
    if platform == "darwin":
        script = f"display notification {_applescript_quote(message)} with title {_applescript_quote(title)}"
        return ["osascript", "-e", script]
    if platform.startswith("linux") and which("notify-send"):
        return ["notify-send", title, message]
    return None


class Notifier:
    """Sends one-line desktop notifications; failures are ignored."""

    def __init__(
        self,
        enabled: bool = True,
        title: str = "stacksync",
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.enabled = enabled
        self.title = title
        self._spawn = spawn

    def send(self, message: str, title: Optional[str] = None) -> None:
        if not self.enabled:
            return

        command = build_notification_command(title or self.title, message)
        if command is None:
            return

        try:
            self._spawn(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError:
            pass
