import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict

from stacksync.utils.diagnostics import ConfigError

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]+))?\}")
CONFIG_FILE_NAME = "stacksync.yaml"

def interpolate_env_vars(content: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variables."""
    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, content)

def load_config(path: Path) -> Dict[str, Any]:
    """
    Load stacksync.yaml with environment variable interpolation.

    Only the known sections (stacksync, compose, sync) are kept. A missing
    file yields an empty dict; unreadable or malformed YAML raises ConfigError.
    """
    if not path.exists():
        return {}

    try:
        content = path.read_text(encoding="utf-8")
        interpolated_content = interpolate_env_vars(content)
        full_config = yaml.safe_load(interpolated_content) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not load {path}: {exc}") from exc

    if not isinstance(full_config, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level.")

    allowed_keys = {"stacksync", "compose", "sync"}
    filtered_config = {k: v for k, v in full_config.items() if k in allowed_keys}

    return filtered_config
