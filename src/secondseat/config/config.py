"""
Configuration management for secondseat.

Handles:
- Loading configuration from a JSON file
- Default configuration paths
- Writing a default configuration file on request

Only settings live here. Device state is never stored: it is read from
the X server on every run.
"""

import json
import os
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional
import logging

from ..core.errors import SecondSeatError

logger = logging.getLogger(__name__)


# Default configuration paths
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
CONFIG_DIR = Path(XDG_CONFIG_HOME) / "secondseat"
CONFIG_FILE = CONFIG_DIR / "config.json"


@dataclass
class Config:
    """Complete secondseat configuration."""
    # Name given to the primary pair of the second seat
    primary_name: str = "secondseat"
    # Seconds to wait after a reconnect before looking for the new device
    settle_delay: float = 0.5
    # Seconds before an xinput call is abandoned (None = wait forever)
    command_timeout: Optional[float] = None
    # xinput executable
    xinput_command: str = "xinput"
    # Lowest supported xserver-xorg-core version
    min_xserver_version: str = "1.20"
    # Skip the dpkg based version check (non-Debian systems)
    skip_version_check: bool = False
    # Remove the created primary pair if reattaching devices fails
    cleanup_on_failure: bool = False
    # Enable verbose logging
    verbose: bool = False
    # Log file path (empty = stderr only)
    log_file: str = ""


class ConfigError(SecondSeatError):
    """Configuration-related error."""
    pass


# Accepted JSON types per field; ints are fine where floats are expected
_FIELD_TYPES = {
    "primary_name": (str,),
    "settle_delay": (int, float),
    "command_timeout": (int, float, type(None)),
    "xinput_command": (str,),
    "min_xserver_version": (str,),
    "skip_version_check": (bool,),
    "cleanup_on_failure": (bool,),
    "verbose": (bool,),
    "log_file": (str,),
}


class ConfigManager:
    """
    Manages the secondseat configuration file.

    The file is optional; a missing file means every default applies.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the config manager.

        Args:
            config_dir: Override default config directory
        """
        self.config_dir = config_dir or CONFIG_DIR
        self.config_file = self.config_dir / "config.json"

        self._config: Optional[Config] = None

    def ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> Config:
        """
        Load configuration from file.

        Falls back to defaults if the file doesn't exist or is not valid JSON.

        Returns:
            Loaded or default configuration

        Raises:
            ConfigError: If a setting has the wrong type or value
        """
        if self._config is not None:
            return self._config

        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.error(f"Error loading config: {e}")
                logger.info("Using default configuration")
                self._config = Config()
            else:
                self._config = self._parse_config(data)
                logger.info(f"Loaded config from {self.config_file}")
        else:
            logger.info("Config file not found, using defaults")
            self._config = Config()

        return self._config

    def _parse_config(self, data: Any) -> Config:
        """Parse config dict into Config object."""
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_file} must contain a JSON object")

        known = {f.name for f in fields(Config)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config setting '{key}'")
                continue
            expected = _FIELD_TYPES[key]
            # bool is an int subclass, don't let true pass as a number
            if not isinstance(value, expected) or (
                    isinstance(value, bool) and bool not in expected):
                raise ConfigError(
                    f"Config setting '{key}' has invalid value {value!r}")
            values[key] = value

        config = Config(**values)
        if config.settle_delay < 0:
            raise ConfigError("Config setting 'settle_delay' must not be negative")
        if config.command_timeout is not None and config.command_timeout <= 0:
            raise ConfigError("Config setting 'command_timeout' must be positive")
        if not config.primary_name:
            raise ConfigError("Config setting 'primary_name' must not be empty")
        return config

    def save_config(self, config: Optional[Config] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Config to save (uses current if None)

        Raises:
            ConfigError: If the file cannot be written
        """
        if config is not None:
            self._config = config

        if self._config is None:
            raise ConfigError("No configuration to save")

        try:
            self.ensure_config_dir()
            with open(self.config_file, "w") as f:
                json.dump(asdict(self._config), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Could not write {self.config_file}: {e}") from e

        logger.info(f"Saved config to {self.config_file}")

    def reset_to_defaults(self) -> None:
        """Write the default configuration to disk."""
        self._config = Config()
        self.save_config()


def load_config(config_dir: Optional[Path] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_dir: Override default config directory

    Returns:
        Loaded configuration
    """
    manager = ConfigManager(config_dir)
    return manager.load_config()
