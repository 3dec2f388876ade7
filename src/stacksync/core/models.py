from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MARKER_FILE_NAME = ".stacksync.initialized"
PID_FILE_NAME = ".stacksync.pid"
LOG_FILE_NAME = ".stacksync.log"


class StackSyncSettings(BaseSettings):
    """
    Tool-level settings (the 'stacksync' section in stacksync.yaml).
    """
    model_config = SettingsConfigDict(env_prefix='STACKSYNC_', extra='ignore')

    notifications: bool = True
    notify_title: str = "stacksync"
    log_level: str = "INFO"


class ComposeSettings(BaseModel):
    """
    How the container stack is driven (the 'compose' section in stacksync.yaml).
    """
    model_config = ConfigDict(extra='ignore')

    command: List[str] = Field(default_factory=lambda: ["docker", "compose"])
    files: List[str] = Field(default_factory=lambda: ["docker-compose.yml", "docker-compose-dev.yml"])
    project_name: Optional[str] = None

    @field_validator("command")
    @classmethod
    def _command_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("compose.command cannot be empty.")
        return value


class SyncSettings(BaseModel):
    """
    Sync engine settings (the 'sync' section in stacksync.yaml).

    `ignore` applies to every sync run. `initial_ignore` is added on top of it
    for the one-shot initial pass only.
    """
    model_config = ConfigDict(extra='ignore')

    engine: str = "unison"
    container_command: List[str] = Field(default_factory=lambda: ["docker"])
    container_pattern: str = "sync"
    port: int = Field(default=5000, ge=1, le=65535)
    host: str = "127.0.0.1"
    ignore: List[str] = Field(
        default_factory=lambda: [
            "Name .git",
            f"Name {PID_FILE_NAME}",
            f"Name {LOG_FILE_NAME}",
        ]
    )
    initial_ignore: List[str] = Field(
        default_factory=lambda: [
            f"Name {MARKER_FILE_NAME}",
            "Name .idea",
            "Name .vscode",
            "Name *.swp",
            "Name docker-compose*.yml",
            "Name stacksync.yaml",
        ]
    )
    extra_args: List[str] = Field(default_factory=list)

    def initial_ignore_rules(self) -> List[str]:
        """Ignore rules for the initial pass: the watch rules plus the initial-only ones."""
        rules = list(self.ignore)
        for rule in self.initial_ignore:
            if rule not in rules:
                rules.append(rule)
        return rules
