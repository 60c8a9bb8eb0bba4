"""
Snapshot catalog for litesnap.

The catalog is the read path: it enumerates snapshot files in a directory,
attaches filesystem metadata, and optionally a checksum and validity verdict.
The directory listing itself is the source of truth; no index file exists.

Invariants:
    - A missing directory yields an empty list
    - Results are ordered newest-first by creation time, ties by filename
    - Checksums and verdicts are computed serially, one file at a time
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..engine import DatabaseEngine
from ..errors import SnapshotIOError

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*.db"


def matches_pattern(filename: str, pattern: str) -> bool:
    """Restricted glob: ``*``, ``*.*``, ``*.<ext>`` or an exact filename."""
    if pattern in ("*", "*.*"):
        return True
    if pattern.startswith("*."):
        return filename.endswith("." + pattern[2:])
    return filename == pattern


def _created_time(stats: os.stat_result) -> float:
    # st_birthtime exists on macOS/BSD (and Windows from 3.12); ctime elsewhere
    return getattr(stats, "st_birthtime", stats.st_ctime)


@dataclass
class SnapshotInfo:
    """Catalog entry for one snapshot file.

    Attributes:
        filename: File name within the snapshot directory
        path: Absolute path
        size: Size in bytes
        created: Creation time (UTC)
        modified: Modification time (UTC)
        is_valid: Integrity verdict, None unless requested
        checksum: SHA-256 hex digest, None unless requested or on error
    """

    filename: str
    path: Path
    size: int
    created: datetime
    modified: datetime
    is_valid: bool | None = None
    checksum: str | None = None

    @classmethod
    def from_path(cls, path: Path) -> SnapshotInfo:
        stats = path.stat()
        return cls(
            filename=path.name,
            path=path,
            size=stats.st_size,
            created=datetime.fromtimestamp(_created_time(stats), tz=timezone.utc),
            modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "path": str(self.path),
            "size": self.size,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "is_valid": self.is_valid,
            "checksum": self.checksum,
        }


class SnapshotCatalog:
    """Enumerates snapshot files in a directory.

    Example:
        >>> catalog = SnapshotCatalog(NativeEngine())
        >>> entries = await catalog.list(Path("backups"), include_checksums=True)
        >>> entries[0].filename  # newest
    """

    def __init__(self, engine: DatabaseEngine) -> None:
        self.engine = engine

    def scan(self, directory: Path, pattern: str = DEFAULT_PATTERN) -> list[SnapshotInfo]:
        """Stat every matching regular file, unordered.

        Raises:
            SnapshotIOError: If the directory exists but cannot be read
        """
        if not directory.exists():
            return []

        try:
            names = os.listdir(directory)
        except OSError as e:
            raise SnapshotIOError(f"Failed to list backups: {e}", path=directory) from e

        entries = []
        for name in names:
            if not matches_pattern(name, pattern):
                continue
            path = directory / name
            try:
                if not path.is_file():
                    continue
                entries.append(SnapshotInfo.from_path(path))
            except FileNotFoundError:
                # Removed between listdir and stat
                logger.debug(f"Snapshot vanished during listing: {name}")
        return entries

    async def list(
        self,
        directory: Path,
        pattern: str = DEFAULT_PATTERN,
        include_checksums: bool = False,
    ) -> list[SnapshotInfo]:
        """List snapshots newest-first.

        Args:
            directory: Snapshot directory
            pattern: Restricted glob (see matches_pattern)
            include_checksums: Also compute checksum and integrity verdict

        Returns:
            Catalog entries ordered by creation time, newest first
        """
        entries = self.scan(directory, pattern)

        if include_checksums:
            for entry in entries:
                entry.checksum = await self.engine.checksum(entry.path)
                entry.is_valid = await self.engine.integrity_check(entry.path)

        entries.sort(key=lambda e: e.filename)
        entries.sort(key=lambda e: e.created, reverse=True)
        return entries
