"""Stack and sync lifecycle components."""

from stacksync.runtime.compose import ComposeStack
from stacksync.runtime.coordinator import LifecycleCoordinator, SessionStatus, is_affirmative
from stacksync.runtime.initial_sync import InitialSync
from stacksync.runtime.notify import Notifier
from stacksync.runtime.ports import PortResolver
from stacksync.runtime.watcher import (
	WatcherHandle,
	WatcherProbe,
	WatcherRecord,
	WatcherState,
	is_process_alive,
)

__all__ = [
	"ComposeStack",
	"InitialSync",
	"LifecycleCoordinator",
	"Notifier",
	"PortResolver",
	"SessionStatus",
	"WatcherHandle",
	"WatcherProbe",
	"WatcherRecord",
	"WatcherState",
	"is_affirmative",
	"is_process_alive",
]
