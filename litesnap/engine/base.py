"""
Base protocol and types for the database engine tooling abstraction.

The backup manager never talks to SQLite directly. It goes through a
DatabaseEngine, which offers four capabilities:
- hot copy: consistent copy of a database that may be open for writes
- compact copy: hot copy that also reclaims free pages
- integrity check: "is this file a healthy database?"
- checksum: content digest of any file

Invariants:
    - integrity_check() and checksum() never raise; failures become False/None
    - hot_copy() and compact_copy() raise SnapshotIOError on any failure
    - Implementations hold no per-call state

How to change safely:
    - Protocol changes require updating every implementation
    - Keep the fail-closed contract of integrity_check(); callers rely on it
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..errors import UnknownStrategyError

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)

# Single canonical token the engine reports for a healthy file.
INTEGRITY_OK = "ok"


class Strategy(Enum):
    """How a snapshot is produced.

    Values are the method names accepted on the command line.
    """

    NATIVE_COPY = "backup"
    RAW_COPY = "copy"
    COMPACT_COPY = "vacuum"

    @classmethod
    def parse(cls, value: Strategy | str) -> Strategy:
        """Accept a Strategy or its method name.

        Raises:
            UnknownStrategyError: If the name is not recognised
        """
        if isinstance(value, Strategy):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownStrategyError(str(value))


def is_candidate_file(path: Path) -> bool:
    """Whether path could hold a database at all.

    A zero-byte file opens as an empty database, so it is rejected here
    rather than reported healthy by the engine.
    """
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


@runtime_checkable
class DatabaseEngine(Protocol):
    """Protocol for database engine tooling.

    Example:
        >>> engine = NativeEngine()
        >>> await engine.hot_copy(Path("app.db"), Path("backups/app-backup.db"))
        >>> await engine.integrity_check(Path("backups/app-backup.db"))
        True
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name for logs."""
        ...

    @abstractmethod
    async def hot_copy(self, source: Path, target: Path) -> None:
        """Produce a transactionally consistent copy of source at target.

        Raises:
            SnapshotIOError: If the copy fails
        """
        ...

    @abstractmethod
    async def compact_copy(self, source: Path, target: Path) -> None:
        """Produce a compacted copy of source at target.

        Raises:
            SnapshotIOError: If the copy fails
        """
        ...

    @abstractmethod
    async def integrity_check(self, path: Path) -> bool:
        """Return True only if the engine reports the file as healthy."""
        ...

    @abstractmethod
    async def checksum(self, path: Path) -> str | None:
        """Return the lowercase hex SHA-256 of the file, or None on error."""
        ...


def create_engine(config: EngineConfig | None = None) -> DatabaseEngine:
    """Factory function to create an engine from configuration.

    Args:
        config: Engine configuration (defaults to the native engine)

    Returns:
        Appropriate DatabaseEngine implementation

    Raises:
        ValueError: If backend is not supported
    """
    from ..config import EngineBackend, EngineConfig
    from .command import CommandEngine
    from .native import NativeEngine

    config = config or EngineConfig()
    if config.backend == EngineBackend.NATIVE:
        return NativeEngine()
    elif config.backend == EngineBackend.COMMAND:
        return CommandEngine(
            sqlite_binary=config.sqlite_binary,
            checksum_command=config.checksum_command,
        )
    else:
        raise ValueError(f"Unsupported engine backend: {config.backend}")
