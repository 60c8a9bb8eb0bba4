"""
Snapshot module for litesnap.

This module handles whole-file snapshots of a single SQLite database:
- Producing snapshots (hot copy, raw copy, compacting copy)
- Cataloguing the snapshot directory

Invariants:
    - The snapshot directory is flat; filenames are the only index
    - Only regular files matching the pattern are catalogued
"""

from .catalog import DEFAULT_PATTERN, SnapshotCatalog, SnapshotInfo, matches_pattern
from .producer import (
    SnapshotProducer,
    SnapshotRequest,
    SnapshotResult,
    derive_filename,
    iso_timestamp,
)

__all__ = [
    "DEFAULT_PATTERN",
    "SnapshotCatalog",
    "SnapshotInfo",
    "SnapshotProducer",
    "SnapshotRequest",
    "SnapshotResult",
    "derive_filename",
    "iso_timestamp",
    "matches_pattern",
]
