"""
In-process SQLite engine.

Uses the sqlite3 module instead of external tools:
- Connection.backup() for hot copies
- VACUUM INTO for compacting copies
- PRAGMA integrity_check for verification
- hashlib for checksums

All blocking calls run in a worker thread so the event loop stays free.
Source and verified databases are opened read-only, so a missing file
is an error rather than a new empty database.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import sqlite3
from pathlib import Path

from ..errors import SnapshotIOError
from .base import INTEGRITY_OK, is_candidate_file

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _read_only_uri(path: str) -> str:
    return f"{Path(path).resolve().as_uri()}?mode=ro"


class NativeEngine:
    """DatabaseEngine backed by the sqlite3 module.

    Connections are opened per call and closed before returning.
    """

    @property
    def name(self) -> str:
        return "native"

    async def hot_copy(self, source: Path, target: Path) -> None:
        try:
            await asyncio.get_event_loop().run_in_executor(
                None,
                self._backup_database,
                str(source),
                str(target),
            )
        except (sqlite3.Error, OSError) as e:
            raise SnapshotIOError(f"Hot copy failed: {e}", path=target) from e

    async def compact_copy(self, source: Path, target: Path) -> None:
        try:
            await asyncio.get_event_loop().run_in_executor(
                None,
                self._vacuum_into,
                str(source),
                target,
            )
        except (sqlite3.Error, OSError) as e:
            raise SnapshotIOError(f"Compact copy failed: {e}", path=target) from e

    async def integrity_check(self, path: Path) -> bool:
        if not is_candidate_file(Path(path)):
            return False
        try:
            result = await asyncio.get_event_loop().run_in_executor(
                None,
                self._integrity_check,
                str(path),
            )
        except (sqlite3.Error, OSError) as e:
            logger.debug(f"Integrity check error for {path}: {e}")
            return False
        if result != INTEGRITY_OK:
            logger.debug(f"Integrity check failed for {path}: {result}")
            return False
        return True

    async def checksum(self, path: Path) -> str | None:
        try:
            return await asyncio.get_event_loop().run_in_executor(
                None,
                self._compute_checksum,
                str(path),
            )
        except OSError as e:
            logger.debug(f"Checksum failed for {path}: {e}")
            return None

    def _backup_database(self, source_path: str, dest_path: str) -> None:
        """Create consistent database backup using SQLite backup API."""
        source_conn = sqlite3.connect(_read_only_uri(source_path), uri=True)
        try:
            dest_conn = sqlite3.connect(dest_path)
            try:
                source_conn.backup(dest_conn)
            finally:
                dest_conn.close()
        finally:
            source_conn.close()

    def _vacuum_into(self, source_path: str, dest_path: Path) -> None:
        # VACUUM INTO refuses to write over an existing file
        if dest_path.exists():
            dest_path.unlink()
        conn = sqlite3.connect(_read_only_uri(source_path), uri=True)
        try:
            conn.execute("VACUUM INTO ?", (str(dest_path),))
        finally:
            conn.close()

    def _integrity_check(self, path: str) -> str:
        conn = sqlite3.connect(_read_only_uri(path), uri=True)
        try:
            rows = conn.execute("PRAGMA integrity_check").fetchall()
        finally:
            conn.close()
        return "\n".join(str(row[0]) for row in rows).strip()

    def _compute_checksum(self, file_path: str) -> str:
        """Compute SHA-256 checksum of file."""
        sha256 = hashlib.sha256()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                sha256.update(chunk)
        return sha256.hexdigest()
