"""
litesnap - lifecycle management for SQLite database snapshots.

This package creates, verifies, lists, prunes and restores whole-file
snapshots of a single local SQLite database:

    ┌──────────────┐   create    ┌──────────────────┐
    │  live .db    │────────────▶│ snapshot dir     │
    │ (database)   │◀────────────│  (flat *.db)     │
    └──────────────┘   restore   └──────────────────┘
           │                        │         │
           ▼                        ▼         ▼
      integrity check            catalog   retention

Invariants:
    - The snapshot directory listing is the only catalog; no manifest
    - create_backup() and restore() return results instead of raising
    - Verification fails closed: anything not proven healthy is "invalid"
    - Snapshots that fail their own integrity check are deleted

How to change safely:
    - Engine capabilities live behind the DatabaseEngine protocol
    - Add new snapshot strategies to Strategy and SnapshotProducer together
"""

from ._version import __version__
from .config import EngineBackend, EngineConfig, ManagerConfig
from .engine import CommandEngine, DatabaseEngine, NativeEngine, Strategy, create_engine
from .errors import ConfigError, IntegrityError, LitesnapError, SnapshotIOError
from .manager import BackupManager, validate_database
from .restore import RestoreRequest, RestoreResult
from .retention import RetentionPolicy, RetentionResult
from .snapshot import SnapshotInfo, SnapshotRequest, SnapshotResult

__all__ = [
    "__version__",
    # Manager
    "BackupManager",
    "validate_database",
    # Configuration
    "ManagerConfig",
    "EngineConfig",
    "EngineBackend",
    # Engine
    "DatabaseEngine",
    "NativeEngine",
    "CommandEngine",
    "Strategy",
    "create_engine",
    # Requests and results
    "SnapshotRequest",
    "SnapshotResult",
    "SnapshotInfo",
    "RetentionPolicy",
    "RetentionResult",
    "RestoreRequest",
    "RestoreResult",
    # Errors
    "LitesnapError",
    "ConfigError",
    "SnapshotIOError",
    "IntegrityError",
]
