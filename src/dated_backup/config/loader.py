"""Configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
The configuration is JSON (``config.json`` in the working directory); a TOML
document with the same structure is accepted when its path ends in ``.toml``.
"""

import json
import tomllib
from pathlib import Path
from typing import Any

from ..__util__ import FatalError
from .schema import (
    Config,
    DatabaseConfig,
    LocalConfig,
    PathPair,
    RemoteConfig,
    ServerConfig,
    SSHConfig,
)


class ConfigError(FatalError):
    """Configuration loading or validation error."""

    pass


class ConfigNotFoundError(ConfigError):
    """The configuration file does not exist."""

    pass


CONFIG_NAME = "config.json"

# Section names used by the original folder/database scripts
SECTION_ALIASES = {
    "local": ("local", "localy"),
    "remote": ("remote", "remotely"),
}


def find_config_file(explicit_path: str | None = None, cwd: Path | None = None) -> Path:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)
        cwd: Directory searched for ``config.json`` (default: working directory)

    Returns:
        Path to the config file

    Raises:
        ConfigNotFoundError: If the file does not exist
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigNotFoundError(f"Config file {explicit_path} not found!")

    path = (cwd or Path.cwd()) / CONFIG_NAME
    if path.exists():
        return path
    raise ConfigNotFoundError(f"Config file {CONFIG_NAME} not found!")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    for key in SECTION_ALIASES[name]:
        if key in data:
            value = data[key]
            if value is None:
                return {}
            if not isinstance(value, dict):
                raise ConfigError(f"Section '{key}' must be an object")
            return value
    return {}


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be an object")
    if key not in data:
        raise ConfigError(f"{where} missing required '{key}' field")
    return data[key]


def _list(data: dict[str, Any], key: str, where: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"{where} '{key}' must be a list")
    return value


def _parse_path_pair(data: dict[str, Any], where: str) -> PathPair:
    """Parse a {source, target} pair from dict."""
    return PathPair(
        source=str(_require(data, "source", where)),
        target=str(_require(data, "target", where)),
    )


def _parse_ssh(data: dict[str, Any], where: str) -> SSHConfig:
    """Parse ssh connection info from dict."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be an object")
    port = data.get("port") or 22
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ConfigError(f"{where} has invalid port: {port!r}")

    return SSHConfig(
        username=str(_require(data, "username", where)),
        host=str(_require(data, "host", where)),
        port=port,
    )


def _parse_database(data: dict[str, Any], where: str) -> DatabaseConfig:
    """Parse database dump configuration from dict."""
    return DatabaseConfig(
        engine=str(_require(data, "engine", where)),
        host=str(_require(data, "host", where)),
        user=str(_require(data, "user", where)),
        password=str(data.get("password", "")),
        database_names=[str(n) for n in _list(data, "database_names", where)],
        paths=[str(p) for p in _list(data, "paths", where)],
    )


def _parse_server(data: dict[str, Any], index: int) -> ServerConfig:
    """Parse remote server configuration from dict."""
    where = f"Server #{index + 1}"
    ssh = _parse_ssh(_require(data, "ssh", where), f"{where} ssh")

    paths = [
        _parse_path_pair(p, f"{where} path #{i + 1}")
        for i, p in enumerate(_list(data, "paths", where))
    ]
    databases = [
        _parse_database(d, f"{where} database #{i + 1}")
        for i, d in enumerate(_list(data, "databases", where))
    ]
    return ServerConfig(ssh=ssh, paths=paths, databases=databases)


def _parse_local(data: dict[str, Any]) -> LocalConfig:
    """Parse local section from dict."""
    return LocalConfig(
        enabled=bool(data.get("enabled", False)),
        paths=[
            _parse_path_pair(p, f"Local path #{i + 1}")
            for i, p in enumerate(_list(data, "paths", "Local section"))
        ],
    )


def _parse_remote(data: dict[str, Any]) -> RemoteConfig:
    """Parse remote section from dict."""
    return RemoteConfig(
        enabled=bool(data.get("enabled", False)),
        servers=[
            _parse_server(s, i)
            for i, s in enumerate(_list(data, "servers", "Remote section"))
        ],
    )


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.local.enabled and not config.remote.enabled:
        warnings.append("Neither local nor remote backups are enabled")

    if config.local.enabled and not config.local.paths:
        warnings.append("Local backups enabled but no paths configured")

    if config.remote.enabled and not config.remote.servers:
        warnings.append("Remote backups enabled but no servers configured")

    for server in config.remote.servers:
        if not server.paths and not server.databases:
            warnings.append(
                f"Server '{server.ssh.host}' has neither paths nor databases"
            )
        for db in server.databases:
            if not db.database_names or not db.paths:
                warnings.append(
                    f"Database entry on '{db.host}' has no database names or paths"
                )

    return warnings


def parse_config(data: dict[str, Any]) -> Config:
    """Build a Config from already decoded data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be an object")
    return Config(
        local=_parse_local(_section(data, "local")),
        remote=_parse_remote(_section(data, "remote")),
    )


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from a JSON (or TOML) file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigNotFoundError(f"Config file {path} not found!")

    try:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    config = parse_config(data)
    return config, _validate_config(config)
