"""
Restore orchestrator for litesnap.

Reinstates a snapshot as the live database in one linear sequence:
1. Verify the snapshot (optional); a bad snapshot aborts before any write
2. Take a pre-restore safety copy of the current target (optional)
3. Raw-copy the snapshot over the target
4. Verify the target; failure is reported even though the write happened

Invariants:
    - The target is never written if step 1 or step 2 fails
    - A failed step 4 is never reported as success
    - No automatic rollback: the safety copy path is returned so the caller
      can recover

How to change safely:
    - Keep step order; the safety copy must exist before the overwrite
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..engine import DatabaseEngine, Strategy
from ..errors import IntegrityError, LitesnapError, SnapshotIOError
from ..snapshot.producer import SnapshotProducer, iso_timestamp

logger = logging.getLogger(__name__)


def safety_copy_filename() -> str:
    return f"pre-restore-backup-{int(time.time() * 1000)}.db"


@dataclass(frozen=True)
class RestoreRequest:
    """Options for a restore.

    Attributes:
        target_path: Where to restore (default: the configured database)
        verify_before_restore: Check the snapshot before touching the target
        snapshot_current_before_restore: Take a safety copy of the target first
    """

    target_path: Path | None = None
    verify_before_restore: bool = True
    snapshot_current_before_restore: bool = True


@dataclass
class RestoreResult:
    """Result of a restore call.

    Attributes:
        success: Whether the target was written and passed verification
        timestamp: ISO timestamp of completion
        restored_from: Snapshot path
        restored_to: Target path
        pre_restore_backup: Safety copy path, if one was taken
        error: Error message if failed
    """

    success: bool
    timestamp: str
    restored_from: Path | None = None
    restored_to: Path | None = None
    pre_restore_backup: Path | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "timestamp": self.timestamp,
            "restored_from": str(self.restored_from) if self.restored_from else None,
            "restored_to": str(self.restored_to) if self.restored_to else None,
            "pre_restore_backup": str(self.pre_restore_backup)
            if self.pre_restore_backup
            else None,
            "error": self.error,
        }


class RestoreOrchestrator:
    """Runs the restore sequence.

    Attributes:
        engine: Engine used for verification
        producer: Producer used for the safety copy
        backup_directory: Where safety copies are written

    Example:
        >>> orchestrator = RestoreOrchestrator(engine, producer, Path("backups"))
        >>> result = await orchestrator.restore(snapshot, RestoreRequest(target_path=db))
    """

    def __init__(
        self,
        engine: DatabaseEngine,
        producer: SnapshotProducer,
        backup_directory: Path,
    ) -> None:
        self.engine = engine
        self.producer = producer
        self.backup_directory = backup_directory

    async def restore(self, snapshot_path: Path, request: RestoreRequest) -> RestoreResult:
        """Execute the restore operation.

        Args:
            snapshot_path: Snapshot to reinstate
            request: Restore options; target_path must be set

        Returns:
            RestoreResult indicating success/failure
        """
        target = Path(request.target_path) if request.target_path else None
        if target is None:
            return RestoreResult(
                success=False, timestamp=iso_timestamp(), error="Restore target is required"
            )
        snapshot_path = Path(snapshot_path)
        pre_restore_backup: Path | None = None

        logger.info(
            "Starting restore",
            extra={"restored_from": str(snapshot_path), "restored_to": str(target)},
        )

        try:
            # Step 1: refuse known-bad snapshots before any mutation
            if request.verify_before_restore:
                if not await self.engine.integrity_check(snapshot_path):
                    raise IntegrityError("Backup file failed integrity check", path=snapshot_path)

            # Step 2: keep the current state before clobbering it
            if request.snapshot_current_before_restore and target.exists():
                pre_restore_backup = await self._take_safety_copy(target)

            # Step 3: reinstate
            await self._copy_over(snapshot_path, target)

            # Step 4: post-condition
            if not await self.engine.integrity_check(target):
                raise IntegrityError("Restored database failed integrity check", path=target)

        except (LitesnapError, OSError) as e:
            logger.error(f"Restore failed: {e}")
            return RestoreResult(
                success=False,
                timestamp=iso_timestamp(),
                restored_from=snapshot_path,
                restored_to=target,
                pre_restore_backup=pre_restore_backup,
                error=str(e),
            )

        logger.info(
            "Restore completed",
            extra={
                "restored_from": str(snapshot_path),
                "restored_to": str(target),
                "pre_restore_backup": str(pre_restore_backup) if pre_restore_backup else None,
            },
        )
        return RestoreResult(
            success=True,
            timestamp=iso_timestamp(),
            restored_from=snapshot_path,
            restored_to=target,
            pre_restore_backup=pre_restore_backup,
        )

    async def _take_safety_copy(self, target: Path) -> Path:
        """Snapshot the current target with the default strategy.

        Raises:
            SnapshotIOError: If the copy cannot be made
        """
        self.backup_directory.mkdir(parents=True, exist_ok=True)
        safety_path = self.backup_directory / safety_copy_filename()
        try:
            await self.producer.produce(Strategy.NATIVE_COPY, target, safety_path)
        except SnapshotIOError as e:
            raise SnapshotIOError(
                f"Failed to create pre-restore backup: {e.message}", path=safety_path
            ) from e
        logger.info(f"Pre-restore backup created at {safety_path}")
        return safety_path

    async def _copy_over(self, snapshot_path: Path, target: Path) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.get_event_loop().run_in_executor(
                None,
                shutil.copyfile,
                snapshot_path,
                target,
            )
        except OSError as e:
            raise SnapshotIOError(f"Failed to copy backup into place: {e}", path=target) from e
