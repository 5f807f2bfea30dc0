"""
Configuration module for secondseat.

Provides the optional settings file for the command line tool.
"""

from .config import (
    Config,
    ConfigManager,
    ConfigError,
    load_config,
    CONFIG_DIR,
    CONFIG_FILE,
)

__all__ = [
    "Config",
    "ConfigManager",
    "ConfigError",
    "load_config",
    "CONFIG_DIR",
    "CONFIG_FILE",
]
