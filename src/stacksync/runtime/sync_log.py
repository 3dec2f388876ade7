from __future__ import annotations

import time
from collections import deque
from pathlib import Path
from typing import Callable, Iterator, List


def read_tail(path: Path, lines: int = 20) -> List[str]:
    """Return the last `lines` lines of the sync log (empty when it does not exist)."""
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        return [line.rstrip("\n") for line in deque(handle, maxlen=max(0, lines))]


def tail_log(
    path: Path,
    lines: int = 20,
    follow: bool = True,
    poll_interval: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[str]:
    """Yield the tail of the sync log, then keep yielding new lines when following.

    Following survives the log being removed or truncated by another command;
    it only ends when the caller stops iterating (or KeyboardInterrupt).
    """
    yield from read_tail(path, lines)
    if not follow:
        return

    position = path.stat().st_size if path.exists() else 0
    pending = b""
    while True:
        if not path.exists():
            position = 0
            pending = b""
            sleep(poll_interval)
            continue

        size = path.stat().st_size
        if size < position:
            position = 0
            pending = b""

        if size > position:
            # Byte offsets; only whole lines are decoded.
            with path.open("rb") as handle:
                handle.seek(position)
                chunk = handle.read()
                position = handle.tell()
            pending += chunk
            *complete, pending = pending.split(b"\n")
            for line in complete:
                yield line.decode("utf-8", errors="replace")
            continue

        sleep(poll_interval)
