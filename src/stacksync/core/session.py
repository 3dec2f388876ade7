from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ValidationError
from stacksync.config.loader import CONFIG_FILE_NAME, load_config
from stacksync.utils.diagnostics import ConfigError
from stacksync.core.models import (
    LOG_FILE_NAME,
    MARKER_FILE_NAME,
    PID_FILE_NAME,
    ComposeSettings,
    StackSyncSettings,
    SyncSettings,
)


class SyncSession(BaseModel):
    """
    Everything one stacksync invocation needs to know about its sync root.

    Built once per command and handed to every component; nothing in the
    package keeps module-level path state.
    """
    # The local directory kept in sync with the container
    root: Path

    # Tool Settings (Maps to 'stacksync' section)
    settings: StackSyncSettings = Field(default_factory=StackSyncSettings)

    # Stack Control (Maps to 'compose' section)
    compose: ComposeSettings = Field(default_factory=ComposeSettings)

    # Sync Engine (Maps to 'sync' section)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None, **data: Any):
        """
        Initialize the session, optionally seeding settings from a config dictionary.
        """
        if config_dict:
            if 'settings' not in data:
                data['settings'] = StackSyncSettings(**(config_dict.get('stacksync') or {}))
            if 'compose' not in data:
                data['compose'] = ComposeSettings(**(config_dict.get('compose') or {}))
            if 'sync' not in data:
                data['sync'] = SyncSettings(**(config_dict.get('sync') or {}))

        super().__init__(**data)

    @classmethod
    def from_root(cls, root: Path) -> "SyncSession":
        """Resolve the root and load its stacksync.yaml, if any."""
        resolved = root.expanduser().resolve()
        config_data = load_config(resolved / CONFIG_FILE_NAME)
        try:
            return cls(config_dict=config_data, root=resolved)
        except ValidationError as exc:
            raise ConfigError(f"Invalid settings in {resolved / CONFIG_FILE_NAME}: {exc}") from exc

    @property
    def marker_path(self) -> Path:
        return self.root / MARKER_FILE_NAME

    @property
    def pid_path(self) -> Path:
        return self.root / PID_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.root / LOG_FILE_NAME

    def is_initialized(self) -> bool:
        return self.marker_path.exists()

    def clear_log(self) -> None:
        """Remove the sync log so the next run starts with a fresh one."""
        self.log_path.unlink(missing_ok=True)

    def clear_marker(self) -> None:
        self.marker_path.unlink(missing_ok=True)
