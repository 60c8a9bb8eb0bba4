"""
Database engine tooling for litesnap.

This module provides a pluggable engine interface supporting:
- native: the sqlite3 module linked into Python (default)
- command: the sqlite3 shell and shasum as subprocesses

Invariants:
    - Verification and checksums fail closed (False / None), never raise
    - Copy operations raise SnapshotIOError with the tool's message
"""

from .base import INTEGRITY_OK, DatabaseEngine, Strategy, create_engine
from .command import CommandEngine
from .native import NativeEngine

__all__ = [
    # Protocol and types
    "DatabaseEngine",
    "Strategy",
    "INTEGRITY_OK",
    # Factory
    "create_engine",
    # Implementations
    "CommandEngine",
    "NativeEngine",
]
