"""
Converter configuration for compose2podman.

Holds the defaults used by the generators (pod name, labels, unit timeouts,
file modes). Can be loaded from a small YAML file.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

DEFAULT_POD_NAME = "compose-pod"
DEFAULT_APP_LABEL = "compose2podman"


@dataclass
class ConverterConfig:
    """Settings shared by the kube and quadlet generators."""
    pod_name: str = DEFAULT_POD_NAME
    app_label: str = DEFAULT_APP_LABEL
    pod_restart_policy: str = "Always"
    start_timeout: int = 900
    wanted_by: str = "default.target"
    file_mode: int = 0o644
    dir_mode: int = 0o755

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConverterConfig":
        """
        Parse from a config mapping. Unknown keys are ignored.

        Raises:
            ConfigError: If the mapping or one of its values is malformed
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"expected a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}

        try:
            # Modes may be written as octal strings ("0644")
            for key in ("file_mode", "dir_mode"):
                if isinstance(values.get(key), str):
                    values[key] = int(values[key], 8)

            if "start_timeout" in values:
                values["start_timeout"] = int(values["start_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e

        for key in ("pod_name", "app_label", "pod_restart_policy", "wanted_by"):
            if key in values and not isinstance(values[key], str):
                raise ConfigError(f"{key}: expected a string, got {type(values[key]).__name__}")
        for key in ("file_mode", "dir_mode"):
            if key in values and (isinstance(values[key], bool) or not isinstance(values[key], int)):
                raise ConfigError(f"{key}: expected an octal mode, got {values[key]!r}")

        return cls(**values)

    def resolve_pod_name(self, pod_name: Optional[str] = None) -> str:
        """Return pod_name, or the configured default when it is blank."""
        if pod_name and pod_name.strip():
            return pod_name
        return self.pod_name or DEFAULT_POD_NAME


def load_converter_config(path: str) -> ConverterConfig:
    """
    Load converter configuration from a YAML file.

    Args:
        path: Path to the config file

    Returns:
        Parsed ConverterConfig

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If the config file is malformed
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found at {path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    return ConverterConfig.from_dict(data)
