"""
Retention policy engine for litesnap.

Selects which snapshots to delete under an age cutoff or a count cap, then
deletes them one at a time.

Selection:
    - Age: remove entries modified strictly before now - max_age_days
    - Count: keep the max_count most recently modified, remove the rest
    - Age takes precedence when both are supplied

Invariants:
    - The policy is validated before any file is touched
    - One failed deletion never stops the others
    - remaining_files == total_files - removed
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..errors import ConfigError
from ..snapshot.catalog import SnapshotInfo
from ..snapshot.producer import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    """Rule selecting snapshots for removal.

    Attributes:
        max_age_days: Remove snapshots older than this many days
        max_count: Keep at most this many snapshots (0 removes all)
    """

    max_age_days: float | None = None
    max_count: int | None = None

    def validate(self) -> None:
        """Check the policy before use.

        Raises:
            ConfigError: If no criterion is set or a value is out of range.
        """
        if self.max_age_days is None and self.max_count is None:
            raise ConfigError(
                "Either retentionDays or maxBackups must be specified",
                field_name="retention",
            )
        if self.max_age_days is not None and self.max_age_days <= 0:
            raise ConfigError(
                f"retentionDays must be positive, got {self.max_age_days}",
                field_name="max_age_days",
            )
        if self.max_age_days is None and self.max_count is not None:
            if isinstance(self.max_count, bool) or not isinstance(self.max_count, int):
                raise ConfigError(
                    f"maxBackups must be an integer, got {self.max_count!r}",
                    field_name="max_count",
                )
            if self.max_count < 0:
                raise ConfigError(
                    f"maxBackups must not be negative, got {self.max_count}",
                    field_name="max_count",
                )

    def describe(self) -> str:
        if self.max_age_days is not None:
            return f"older than {self.max_age_days:g} days"
        return f"keeping only {self.max_count} most recent"

    def select(
        self,
        entries: Sequence[SnapshotInfo],
        now: datetime | None = None,
    ) -> list[SnapshotInfo]:
        """Return the entries this policy removes."""
        if self.max_age_days is not None:
            cutoff = (now or utc_now()) - timedelta(days=self.max_age_days)
            return [entry for entry in entries if entry.modified < cutoff]

        ordered = sorted(entries, key=lambda e: e.filename)
        ordered.sort(key=lambda e: e.modified, reverse=True)
        return ordered[self.max_count :]


@dataclass
class RetentionResult:
    """Result of a cleanup call.

    Attributes:
        success: False only if the catalog could not be read
        removed: Number of files deleted
        removed_files: Names of deleted files
        errors: One message per file that could not be deleted
        total_files: Files considered
        remaining_files: total_files - removed
        error: Error message if failed
    """

    success: bool
    removed: int = 0
    removed_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_files: int = 0
    remaining_files: int = 0
    error: str | None = None

    @property
    def partial(self) -> bool:
        return self.success and bool(self.errors)


class RetentionEngine:
    """Applies a RetentionPolicy to catalog entries.

    Example:
        >>> engine = RetentionEngine()
        >>> result = engine.apply(RetentionPolicy(max_count=3), entries)
        >>> result.remaining_files
        3
    """

    def apply(
        self,
        policy: RetentionPolicy,
        entries: Sequence[SnapshotInfo],
        now: datetime | None = None,
    ) -> RetentionResult:
        """Delete the snapshots selected by policy.

        Raises:
            ConfigError: If the policy is invalid (nothing is deleted).
        """
        policy.validate()

        selected = policy.select(entries, now=now)
        removed: list[str] = []
        errors: list[str] = []

        for entry in selected:
            try:
                entry.path.unlink()
            except OSError as e:
                reason = e.strerror or str(e)
                errors.append(f"Failed to remove {entry.filename}: {reason}")
                logger.warning(f"Failed to remove backup {entry.filename}: {reason}")
                continue
            removed.append(entry.filename)
            logger.info(f"Removed old backup: {entry.filename}")

        total = len(entries)
        return RetentionResult(
            success=True,
            removed=len(removed),
            removed_files=removed,
            errors=errors,
            total_files=total,
            remaining_files=total - len(removed),
        )
