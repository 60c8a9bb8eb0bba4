"""
Backup manager for litesnap.

BackupManager is the public entry point. It owns two paths (the live
database and the snapshot directory) and composes the producer, catalog,
retention engine and restore orchestrator around one DatabaseEngine.

Operations:
    - create_backup: produce, verify, checksum one snapshot
    - list_backups: catalog the snapshot directory
    - cleanup: apply an age or count retention policy
    - restore: reinstate a snapshot over the live database
    - verify_backup: integrity verdict for any file

Invariants:
    - No state is kept between calls; every call re-reads the filesystem
    - create_backup() and restore() never raise; they return failure results
    - A snapshot that fails its own integrity check is deleted
    - No locking: concurrent callers on one directory must coordinate
      externally
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path

from .config import ManagerConfig
from .engine import DatabaseEngine, create_engine
from .errors import IntegrityError, LitesnapError
from .restore import RestoreOrchestrator, RestoreRequest, RestoreResult
from .retention import RetentionEngine, RetentionPolicy, RetentionResult
from .snapshot import (
    DEFAULT_PATTERN,
    SnapshotCatalog,
    SnapshotInfo,
    SnapshotProducer,
    SnapshotRequest,
    SnapshotResult,
    derive_filename,
    iso_timestamp,
)

logger = logging.getLogger(__name__)


class BackupManager:
    """Lifecycle manager for snapshots of one SQLite database.

    Attributes:
        config: Validated paths
        engine: Engine tooling used for copies, verification and checksums

    Example:
        >>> manager = BackupManager.open("data/app.db")
        >>> result = await manager.create_backup()
        >>> result.success, result.filename
        (True, 'app-backup-2024-01-02T03-04-05-678Z.db')
        >>> await manager.cleanup(max_backups=5)
    """

    def __init__(self, config: ManagerConfig, engine: DatabaseEngine | None = None) -> None:
        self.config = config
        self.engine = engine or create_engine()
        self.producer = SnapshotProducer(self.engine)
        self.catalog = SnapshotCatalog(self.engine)
        self.retention = RetentionEngine()
        self.orchestrator = RestoreOrchestrator(
            self.engine, self.producer, self.config.backup_directory
        )

    @classmethod
    def open(
        cls,
        database_path: str | Path,
        backup_directory: str | Path | None = None,
        create_backup_dir: bool = True,
        engine: DatabaseEngine | None = None,
    ) -> BackupManager:
        """Build a manager from paths.

        Raises:
            ConfigError: If the database file does not exist.
        """
        config = ManagerConfig.create(
            database_path,
            backup_directory=backup_directory,
            auto_create_directory=create_backup_dir,
        )
        return cls(config, engine=engine)

    @property
    def database_path(self) -> Path:
        return self.config.database_path

    @property
    def backup_directory(self) -> Path:
        return self.config.backup_directory

    async def create_backup(self, request: SnapshotRequest | None = None) -> SnapshotResult:
        """Create one snapshot of the configured database.

        Args:
            request: Snapshot options (defaults: timestamped name, verified, hot copy)

        Returns:
            SnapshotResult; never raises
        """
        request = request or SnapshotRequest()
        start_time = time.monotonic()

        try:
            filename = derive_filename(self.database_path, request)
            backup_path = self.backup_directory / filename

            await self.producer.produce(request.strategy, self.database_path, backup_path)

            if request.verify_after_create:
                if not await self.engine.integrity_check(backup_path):
                    backup_path.unlink(missing_ok=True)
                    raise IntegrityError("Backup failed integrity check", path=backup_path)

            size = backup_path.stat().st_size
            checksum = await self.engine.checksum(backup_path)
            duration_ms = int((time.monotonic() - start_time) * 1000)

        except (LitesnapError, OSError) as e:
            logger.error(f"Backup failed: {e}")
            return SnapshotResult.failure(str(e))

        logger.info(
            "Created backup",
            extra={
                "backup_path": str(backup_path),
                "size_bytes": size,
                "method": request.strategy.value,
                "duration_ms": duration_ms,
            },
        )
        return SnapshotResult(
            success=True,
            timestamp=iso_timestamp(),
            backup_path=backup_path,
            filename=filename,
            size=size,
            checksum=checksum,
            duration_ms=duration_ms,
            method=request.strategy,
        )

    async def verify_backup(self, backup_path: str | Path) -> bool:
        """Integrity verdict for any database file; never raises."""
        return await self.engine.integrity_check(Path(backup_path))

    async def list_backups(
        self,
        pattern: str = DEFAULT_PATTERN,
        include_checksums: bool = False,
    ) -> list[SnapshotInfo]:
        """List snapshots newest-first.

        Raises:
            SnapshotIOError: If the directory exists but cannot be read
        """
        return await self.catalog.list(
            self.backup_directory, pattern=pattern, include_checksums=include_checksums
        )

    async def latest_backup(self, pattern: str = DEFAULT_PATTERN) -> SnapshotInfo | None:
        backups = await self.list_backups(pattern=pattern)
        return backups[0] if backups else None

    async def cleanup(
        self,
        retention_days: float | None = None,
        max_backups: int | None = None,
        pattern: str = DEFAULT_PATTERN,
    ) -> RetentionResult:
        """Remove old snapshots by age or count.

        Args:
            retention_days: Remove snapshots older than this (takes precedence)
            max_backups: Keep only this many most recent snapshots
            pattern: Restricted glob selecting snapshot files

        Returns:
            RetentionResult; per-file failures are listed in errors

        Raises:
            ConfigError: If neither criterion is given (nothing is touched)
        """
        policy = RetentionPolicy(max_age_days=retention_days, max_count=max_backups)
        policy.validate()

        try:
            entries = self.catalog.scan(self.backup_directory, pattern)
        except LitesnapError as e:
            logger.error(f"Cleanup failed: {e}")
            return RetentionResult(success=False, error=str(e), errors=[str(e)])

        logger.info(f"Cleaning up backups {policy.describe()} in {self.backup_directory}")
        return self.retention.apply(policy, entries)

    async def restore(
        self,
        backup_path: str | Path,
        request: RestoreRequest | None = None,
    ) -> RestoreResult:
        """Reinstate a snapshot.

        Args:
            backup_path: Snapshot to restore
            request: Restore options (target defaults to the configured database)

        Returns:
            RestoreResult; never raises
        """
        request = request or RestoreRequest()
        if request.target_path is None:
            request = replace(request, target_path=self.database_path)
        return await self.orchestrator.restore(Path(backup_path), request)


async def validate_database(
    database_path: str | Path,
    engine: DatabaseEngine | None = None,
) -> bool:
    """Integrity verdict without a configured manager."""
    return await (engine or create_engine()).integrity_check(Path(database_path))
