"""Configuration schema definitions using dataclasses.

Defines the structure of the backup configuration with sensible defaults.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PathPair:
    """A folder to back up and where its dated copies go.

    Attributes:
        source: Directory to mirror (local path, or remote path for servers)
        target: Local directory receiving ``<basename>/<timestamp>/`` folders
    """

    source: str
    target: str


@dataclass(frozen=True)
class SSHConfig:
    """Secure shell endpoint of a remote server.

    Attributes:
        username: Login user
        host: Host name or address
        port: SSH port
    """

    username: str
    host: str
    port: int = 22


@dataclass(frozen=True)
class DatabaseConfig:
    """Database dump configuration.

    The database endpoint may differ from the SSH endpoint: the dump runs on
    the SSH host and connects to ``host``.

    Attributes:
        engine: Database engine (only the mysql family is supported)
        host: Database host as seen from the SSH host
        user: Database user
        password: Database password
        database_names: Databases to dump
        paths: Local directories receiving ``<db_name>/<timestamp>/`` folders
    """

    engine: str
    host: str
    user: str
    password: str
    database_names: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ServerConfig:
    """Remote server configuration.

    Attributes:
        ssh: Connection settings
        paths: Remote folders to mirror (folder mode)
        databases: Databases to dump (database mode)
    """

    ssh: SSHConfig
    paths: list[PathPair] = field(default_factory=list)
    databases: list[DatabaseConfig] = field(default_factory=list)


@dataclass(frozen=True)
class LocalConfig:
    """Local folder backups."""

    enabled: bool = False
    paths: list[PathPair] = field(default_factory=list)


@dataclass(frozen=True)
class RemoteConfig:
    """Remote folder and database backups."""

    enabled: bool = False
    servers: list[ServerConfig] = field(default_factory=list)


@dataclass(frozen=True)
class Config:
    """Root configuration object.

    Attributes:
        local: Local folder section
        remote: Remote servers section
    """

    local: LocalConfig = field(default_factory=LocalConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    def enabled_local_paths(self) -> list[PathPair]:
        """Local path pairs if the local section is enabled."""
        return list(self.local.paths) if self.local.enabled else []

    def enabled_servers(self) -> list[ServerConfig]:
        """Remote servers if the remote section is enabled."""
        return list(self.remote.servers) if self.remote.enabled else []
