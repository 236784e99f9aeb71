"""Configuration system for dated-backup.

This module provides JSON configuration loading, validation,
and schema definitions for local, remote and database backups.
"""

from .loader import (
    ConfigError,
    ConfigNotFoundError,
    find_config_file,
    load_config,
    parse_config,
)
from .schema import (
    Config,
    DatabaseConfig,
    LocalConfig,
    PathPair,
    RemoteConfig,
    ServerConfig,
    SSHConfig,
)

__all__ = [
    "Config",
    "DatabaseConfig",
    "LocalConfig",
    "PathPair",
    "RemoteConfig",
    "ServerConfig",
    "SSHConfig",
    "load_config",
    "parse_config",
    "find_config_file",
    "ConfigError",
    "ConfigNotFoundError",
]
