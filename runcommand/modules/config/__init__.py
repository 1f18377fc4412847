"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), load_service_config(), load_command_config()
Hidden: Config sources, validation logic, environment parsing

Environment variables carry process settings, the YAML file carries the
command and its execution mode.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .command import CommandConfig, ConfigurationError, load_command_config

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "execute_secret": "Shared secret expected in the x-secret header (EXECUTE_SECRET)",
}

OPTIONAL_CONFIG_KEYS = {
    "config_file_path": {
        "description": "Path to the YAML command configuration (CONFIG_FILE_PATH)",
        "default": "config.yaml",
    },
    "shell_path": {
        "description": "Shell used to execute the command (SHELL_PATH)",
        "default": "/bin/sh",
    },
    "port": {
        "description": "Port the service listens on (LISTEN_PORT)",
        "default": 8080,
    },
    "host": {
        "description": "Bind address (LISTEN_HOST)",
        "default": "0.0.0.0",
    },
    "log_level": {
        "description": "Logging level, one of CRITICAL, ERROR, WARNING, INFO, DEBUG (LOG_LEVEL)",
        "default": "INFO",
    },
}


class ConfigModule:
    """Configuration management module."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        """
        Initialize from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)
        """
        self._environ = os.environ if environ is None else environ
        self._config = self._load_from_env()

    def _load_from_env(self) -> Dict[str, Any]:
        """
        Load configuration from environment, applying documented defaults.

        Values are kept as given; LISTEN_PORT is parsed by load_service_config
        so that file and secret errors are reported first.
        """
        env = self._environ
        self._defaulted = set()

        config_file_path = env.get("CONFIG_FILE_PATH")
        if not config_file_path:
            config_file_path = str(Path.cwd() / OPTIONAL_CONFIG_KEYS["config_file_path"]["default"])
            self._defaulted.add("config_file_path")

        shell_path = env.get("SHELL_PATH")
        if not shell_path:
            shell_path = OPTIONAL_CONFIG_KEYS["shell_path"]["default"]
            self._defaulted.add("shell_path")

        port = env.get("LISTEN_PORT")
        if not port:
            port = OPTIONAL_CONFIG_KEYS["port"]["default"]
            self._defaulted.add("port")

        log_level = env.get("LOG_LEVEL", OPTIONAL_CONFIG_KEYS["log_level"]["default"]).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return {
            "config_file_path": config_file_path,
            "execute_secret": env.get("EXECUTE_SECRET") or None,
            "shell_path": shell_path,
            "port": port,
            "host": env.get("LISTEN_HOST", OPTIONAL_CONFIG_KEYS["host"]["default"]),
            "log_level": log_level,
        }

    def is_default(self, key: str) -> bool:
        """True if the key was not set in the environment and took its default."""
        return key in self._defaulted

    def validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ConfigurationError: If required keys are missing
        """
        missing_keys = [key for key in REQUIRED_CONFIG_KEYS if self._config.get(key) is None]
        if missing_keys:
            raise ConfigurationError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Set EXECUTE_SECRET in the environment."
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['optional']['shell_path']['default'])
            /bin/sh
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


@dataclass(frozen=True)
class ServiceConfig:
    """Everything the service needs after startup validation."""

    command: CommandConfig
    execute_secret: str
    shell_path: str
    host: str
    port: int
    log_level: str = "INFO"


def _parse_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"LISTEN_PORT must be an integer, got {value!r}")
    if not 0 < port < 65536:
        raise ConfigurationError(f"LISTEN_PORT must be between 1 and 65535, got {port}")
    return port


def load_service_config(config_module: Optional[ConfigModule] = None) -> ServiceConfig:
    """
    Resolve the full service configuration.

    Settings are validated in a fixed order: the command file and its
    modes, then the secret, then the shell and port.

    Raises:
        ConfigurationError: On any invalid or missing setting
    """
    config_module = config_module or get_config()

    config_file_path = config_module.get("config_file_path")
    if config_module.is_default("config_file_path"):
        logger.info(f"CONFIG_FILE_PATH not set, using default: {config_file_path}")
    command = load_command_config(config_file_path)

    config_module.validate_required_keys()

    shell_path = config_module.get("shell_path")
    if config_module.is_default("shell_path"):
        logger.info(f"SHELL_PATH not set, defaulting to {shell_path}")

    port = _parse_port(config_module.get("port"))
    if config_module.is_default("port"):
        logger.info(f"LISTEN_PORT not set, defaulting to {port}")

    return ServiceConfig(
        command=command,
        execute_secret=config_module.get("execute_secret"),
        shell_path=shell_path,
        host=config_module.get("host"),
        port=port,
        log_level=config_module.get("log_level"),
    )


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


__all__ = [
    "CommandConfig",
    "ConfigModule",
    "ConfigurationError",
    "ServiceConfig",
    "get_config",
    "load_command_config",
    "load_service_config",
]
