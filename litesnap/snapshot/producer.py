"""
Snapshot producer for litesnap.

Given a source database and a strategy, the producer writes exactly one new
snapshot file at a target path.

Strategies:
    - NATIVE_COPY: engine hot copy; consistent even while the source is
      being written by another process (default)
    - RAW_COPY: byte-for-byte file copy; the caller must guarantee that
      nothing is writing to the source
    - COMPACT_COPY: engine compacting rewrite; slower, smaller output

Invariants:
    - One call creates at most one file (the target)
    - Any failure raises SnapshotIOError; a partial target can be deleted
      and the call retried
    - Generated filenames always end in the database extension
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..engine import DatabaseEngine, Strategy
from ..errors import SnapshotIOError

logger = logging.getLogger(__name__)

DB_EXTENSION = ".db"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SnapshotRequest:
    """Options for creating one snapshot.

    Attributes:
        filename: Custom filename (database extension appended if missing)
        include_timestamp: Embed a timestamp in generated filenames
        verify_after_create: Run an integrity check on the new snapshot
        strategy: How the snapshot is produced
    """

    filename: str | None = None
    include_timestamp: bool = True
    verify_after_create: bool = True
    strategy: Strategy = Strategy.NATIVE_COPY


@dataclass
class SnapshotResult:
    """Result of a create-backup call.

    Attributes:
        success: Whether the snapshot was created (and verified, if asked)
        timestamp: ISO timestamp of completion
        backup_path: Absolute snapshot path
        filename: Snapshot filename
        size: Snapshot size in bytes
        checksum: SHA-256 hex digest, None if it could not be computed
        duration_ms: Wall-clock duration
        method: Strategy used
        error: Error message if failed
    """

    success: bool
    timestamp: str
    backup_path: Path | None = None
    filename: str | None = None
    size: int | None = None
    checksum: str | None = None
    duration_ms: int | None = None
    method: Strategy | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> SnapshotResult:
        return cls(success=False, timestamp=iso_timestamp(), error=error)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["backup_path"] = str(self.backup_path) if self.backup_path else None
        data["method"] = self.method.value if self.method else None
        return data


def derive_filename(
    database_path: Path,
    request: SnapshotRequest,
    now: datetime | None = None,
) -> str:
    """Build the target filename for a snapshot.

    Examples:
        custom "backup1"                 -> "backup1.db"
        app.db, no timestamp             -> "app-backup.db"
        app.db, 2024-01-02T03:04:05.678Z -> "app-backup-2024-01-02T03-04-05-678Z.db"
    """
    if request.filename:
        if request.filename.endswith(DB_EXTENSION):
            return request.filename
        return f"{request.filename}{DB_EXTENSION}"

    base_name = database_path.name
    if base_name.endswith(DB_EXTENSION):
        base_name = base_name[: -len(DB_EXTENSION)]

    suffix = ""
    if request.include_timestamp:
        suffix = "-" + iso_timestamp(now).replace(":", "-").replace(".", "-")

    return f"{base_name}-backup{suffix}{DB_EXTENSION}"


class SnapshotProducer:
    """Writes snapshot files using a DatabaseEngine.

    Example:
        >>> producer = SnapshotProducer(NativeEngine())
        >>> await producer.produce(Strategy.NATIVE_COPY, db_path, target)
    """

    def __init__(self, engine: DatabaseEngine) -> None:
        self.engine = engine

    async def produce(self, strategy: Strategy, source: Path, target: Path) -> None:
        """Produce one snapshot file at target.

        Raises:
            SnapshotIOError: If the engine or filesystem fails
        """
        logger.debug(
            "Producing snapshot",
            extra={"strategy": strategy.value, "source": str(source), "target": str(target)},
        )

        if strategy == Strategy.NATIVE_COPY:
            await self.engine.hot_copy(source, target)
        elif strategy == Strategy.COMPACT_COPY:
            await self.engine.compact_copy(source, target)
        elif strategy == Strategy.RAW_COPY:
            await self._raw_copy(source, target)
        else:
            raise SnapshotIOError(f"Unknown backup method: {strategy}", path=target)

    async def _raw_copy(self, source: Path, target: Path) -> None:
        # copyfile, not copy2: the snapshot's mtime must be its own creation time
        try:
            await asyncio.get_event_loop().run_in_executor(
                None,
                shutil.copyfile,
                source,
                target,
            )
        except OSError as e:
            raise SnapshotIOError(f"Raw copy failed: {e}", path=target) from e
