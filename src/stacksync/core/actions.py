from enum import Enum
from typing import Optional


class SyncAction(str, Enum):
    """The closed set of actions the command surface accepts."""

    START = "start"
    RESTART = "restart"
    STOP = "stop"
    RESET = "reset"
    DESTROY = "destroy"
    LOGS = "logs"
    STATUS = "status"


def parse_action(token: str) -> Optional[SyncAction]:
    """Return the action named by `token`, or None when it names no action."""
    try:
        return SyncAction(token.strip().lower())
    except ValueError:
        return None


ACTION_CHOICES = "|".join(action.value for action in SyncAction)
