"""YAML command configuration loader."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Configuration is missing, malformed or self-contradictory."""


@dataclass(frozen=True)
class CommandConfig:
    """The command to expose and how it is executed."""

    command: str
    run_in_background: bool = False
    run_once: bool = False

    def __post_init__(self) -> None:
        if self.run_once and self.run_in_background:
            raise ConfigurationError("runOnce and runInBackground cannot both be set to true")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandConfig":
        """
        Build a CommandConfig from parsed YAML.

        Args:
            data: Mapping with 'command' and optional 'runInBackground'/'runOnce'

        Raises:
            ConfigurationError: If a field is missing or has the wrong type
        """
        command = data.get("command")
        if not isinstance(command, str):
            raise ConfigurationError("'command' must be set to a string in the config file")

        flags = {}
        for key in ("runInBackground", "runOnce"):
            value = data.get(key, False)
            if value is None:
                value = False
            if not isinstance(value, bool):
                raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}")
            flags[key] = value

        return cls(
            command=command,
            run_in_background=flags["runInBackground"],
            run_once=flags["runOnce"],
        )


def load_command_config(path: Union[str, Path]) -> CommandConfig:
    """
    Load and validate the YAML command configuration.

    Args:
        path: Path to the YAML file

    Returns:
        Validated CommandConfig

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or is invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"error reading config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"error parsing config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"error parsing config file: expected a mapping in {path}")

    return CommandConfig.from_dict(data)
