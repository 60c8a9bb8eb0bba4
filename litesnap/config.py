"""
Configuration management for litesnap.

Settings come from explicit constructor arguments or environment variables.
This module provides typed, immutable configuration classes with validation.

Invariants:
    - ManagerConfig validates the database path exactly once, at construction
    - All paths held by ManagerConfig are absolute
    - Engine and logging settings have sensible defaults for local use

How to change safely:
    - Add new settings with defaults that keep existing callers working
    - Keep environment variable names stable; scripts depend on them
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_SUBDIR = "backups"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class EngineBackend(Enum):
    """Supported database engine tooling backends."""

    NATIVE = "native"
    COMMAND = "command"


@dataclass(frozen=True)
class ManagerConfig:
    """Paths owned by a backup manager.

    Attributes:
        database_path: Absolute path of the live database file
        backup_directory: Absolute path of the snapshot directory
        auto_create_directory: Whether the snapshot directory is created if absent
    """

    database_path: Path
    backup_directory: Path
    auto_create_directory: bool = True

    @classmethod
    def create(
        cls,
        database_path: str | Path | None,
        backup_directory: str | Path | None = None,
        auto_create_directory: bool = True,
    ) -> ManagerConfig:
        """Resolve and validate paths, creating the snapshot directory if asked.

        Args:
            database_path: Path to the database file (must exist)
            backup_directory: Snapshot directory (default: <database dir>/backups)
            auto_create_directory: Create the snapshot directory if missing

        Returns:
            Validated ManagerConfig

        Raises:
            ConfigError: If the database path is missing or not a file.
        """
        if not database_path:
            raise ConfigError("Database path is required", field_name="database_path")

        db_path = Path(database_path).expanduser().resolve()
        if not db_path.is_file():
            raise ConfigError(f"Database file not found: {db_path}", field_name="database_path")

        if backup_directory:
            backup_dir = Path(backup_directory).expanduser().resolve()
        else:
            backup_dir = db_path.parent / DEFAULT_BACKUP_SUBDIR

        if auto_create_directory and not backup_dir.exists():
            backup_dir.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created backup directory {backup_dir}")

        return cls(
            database_path=db_path,
            backup_directory=backup_dir,
            auto_create_directory=auto_create_directory,
        )

    @classmethod
    def from_env(cls) -> ManagerConfig:
        """Load configuration from environment variables."""
        return cls.create(
            database_path=os.getenv("LITESNAP_DATABASE_PATH"),
            backup_directory=os.getenv("LITESNAP_BACKUP_DIR"),
            auto_create_directory=_env_bool("LITESNAP_AUTO_CREATE_DIR", True),
        )


@dataclass(frozen=True)
class EngineConfig:
    """Database engine tooling configuration.

    Attributes:
        backend: Which engine implementation to use
        sqlite_binary: sqlite3 executable for the command backend
        checksum_command: Digest command for the command backend (path is appended)
    """

    backend: EngineBackend = EngineBackend.NATIVE
    sqlite_binary: str = "sqlite3"
    checksum_command: tuple[str, ...] = ("shasum", "-a", "256")

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load configuration from environment variables.

        Raises:
            ConfigError: If LITESNAP_ENGINE names an unknown backend.
        """
        backend_str = os.getenv("LITESNAP_ENGINE", "native").lower()
        try:
            backend = EngineBackend(backend_str)
        except ValueError:
            raise ConfigError(
                f"Invalid LITESNAP_ENGINE '{backend_str}'. Must be one of: native, command",
                field_name="backend",
            )

        checksum_env = os.getenv("LITESNAP_CHECKSUM_COMMAND")
        return cls(
            backend=backend,
            sqlite_binary=os.getenv("LITESNAP_SQLITE_BINARY", "sqlite3"),
            checksum_command=tuple(checksum_env.split())
            if checksum_env
            else ("shasum", "-a", "256"),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
        )


@dataclass
class LitesnapConfig:
    """Process-level configuration shared by every manager.

    Attributes:
        engine: Engine tooling configuration
        observability: Logging configuration
    """

    engine: EngineConfig = field(default_factory=EngineConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> LitesnapConfig:
        """Load complete configuration from environment variables."""
        return cls(
            engine=EngineConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "litesnap configuration loaded",
            extra={
                "engine_backend": self.engine.backend.value,
                "sqlite_binary": self.engine.sqlite_binary
                if self.engine.backend == EngineBackend.COMMAND
                else None,
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
            },
        )


__all__ = [
    "EngineBackend",
    "EngineConfig",
    "LitesnapConfig",
    "ManagerConfig",
    "ObservabilityConfig",
]
