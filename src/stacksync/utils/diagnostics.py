from typing import List, Optional
from pydantic import BaseModel, Field

class CommandResult(BaseModel):
    """
    Outcome of one external tool invocation (compose, docker, unison).
    Call sites branch on `succeeded`; `diagnostic` carries the text worth
    showing to the operator when it is False.
    """
    args: List[str] = Field(default_factory=list)
    succeeded: bool
    returncode: Optional[int] = None
    output: str = ""
    diagnostic: str = ""

    def summary(self) -> str:
        text = (self.diagnostic or self.output).strip()
        if text:
            return text
        if self.returncode is not None:
            return f"exit status {self.returncode}"
        return "no output"

class StackSyncError(Exception):
    """Base class for errors raised by stacksync."""

class ConfigError(StackSyncError):
    """Raised when stacksync.yaml cannot be read or parsed."""

class StackStartError(StackSyncError):
    """
    Raised when the stack cannot be brought up during the initial sync.
    This is the only failure that aborts a whole command.
    """
    def __init__(self, message: str, diagnostic: str = ""):
        self.message = message
        self.diagnostic = diagnostic
        detail = f": {diagnostic}" if diagnostic else ""
        super().__init__(f"{message}{detail}")

class WatcherError(StackSyncError):
    """Raised when the background watcher cannot be started."""
