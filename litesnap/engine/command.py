"""
External-command SQLite engine.

Drives the sqlite3 command-line shell and a digest tool (shasum by default)
as subprocesses. Useful when the host's sqlite3 shell is newer than the
library linked into Python, or when backups must match what operators run
by hand.

Commands are executed without a shell; paths are passed as arguments.
Databases are opened with -readonly and sources must already exist.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from ..errors import SnapshotIOError
from .base import INTEGRITY_OK, is_candidate_file

logger = logging.getLogger(__name__)


def _quote_dot_arg(path: Path) -> str:
    """Quote a path for use inside a sqlite3 dot-command or SQL literal."""
    return "'" + str(path).replace("'", "''") + "'"


def _require_source(source: Path) -> None:
    """The sqlite3 shell creates missing files, so check before running it.

    Raises:
        SnapshotIOError: If source is not an existing regular file
    """
    if not Path(source).is_file():
        raise SnapshotIOError(f"Source database not found: {source}", path=source)


class CommandEngine:
    """DatabaseEngine backed by external processes.

    Attributes:
        sqlite_binary: sqlite3 executable name or path
        checksum_command: Digest command; the file path is appended
    """

    def __init__(
        self,
        sqlite_binary: str = "sqlite3",
        checksum_command: Sequence[str] = ("shasum", "-a", "256"),
    ) -> None:
        self.sqlite_binary = sqlite_binary
        self.checksum_command = tuple(checksum_command)

    @property
    def name(self) -> str:
        return "command"

    async def hot_copy(self, source: Path, target: Path) -> None:
        _require_source(source)
        await self._run_checked(
            [self.sqlite_binary, "-readonly", str(source), f".backup {_quote_dot_arg(target)}"],
            target,
        )

    async def compact_copy(self, source: Path, target: Path) -> None:
        _require_source(source)
        if target.exists():
            target.unlink()
        await self._run_checked(
            [
                self.sqlite_binary,
                "-readonly",
                str(source),
                f"VACUUM INTO {_quote_dot_arg(target)};",
            ],
            target,
        )

    async def integrity_check(self, path: Path) -> bool:
        if not is_candidate_file(Path(path)):
            return False
        try:
            stdout = await self._run_checked(
                [self.sqlite_binary, "-readonly", str(path), "PRAGMA integrity_check;"],
                path,
            )
        except SnapshotIOError as e:
            logger.debug(f"Integrity check error for {path}: {e}")
            return False
        return stdout.strip() == INTEGRITY_OK

    async def checksum(self, path: Path) -> str | None:
        try:
            stdout = await self._run_checked([*self.checksum_command, str(path)], path)
        except SnapshotIOError as e:
            logger.debug(f"Checksum failed for {path}: {e}")
            return None
        fields = stdout.split()
        return fields[0].lower() if fields else None

    async def _run_checked(self, argv: list[str], path: Path) -> str:
        """Run a command and return its stdout.

        Raises:
            SnapshotIOError: If the command is missing or exits non-zero
        """
        logger.debug(f"Running {argv[0]}", extra={"argv": argv})
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SnapshotIOError(f"Command not available: {argv[0]} ({e})", path=path) from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() or "no output"
            raise SnapshotIOError(
                f"{argv[0]} exited with status {proc.returncode}: {message}",
                path=path,
                returncode=proc.returncode,
            )
        return stdout.decode("utf-8", errors="replace")
