"""
Error types for litesnap.

This module defines the exception taxonomy used across the backup manager:
- LitesnapError: Base exception
- ConfigError: Invalid construction or operation input
- SnapshotIOError: Filesystem or external-process failure
- IntegrityError: Post-condition verification failure

Invariants:
    - All errors inherit from LitesnapError
    - ConfigError is raised before any filesystem mutation
    - create_backup() and restore() convert errors to failure results;
      only configuration faults escape to the caller
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class LitesnapError(Exception):
    """Base exception for all litesnap errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "LITESNAP_ERROR"
        self.details = details or {}


class ConfigError(LitesnapError):
    """Invalid configuration or operation input.

    Raised when:
    - Database path is missing or does not exist
    - Neither retention criterion is supplied
    - An engine backend or strategy name is unknown
    """

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message, code="CONFIG_ERROR", details={"field": field_name})
        self.field_name = field_name


class UnknownStrategyError(ConfigError):
    """Snapshot strategy name is not recognised."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown backup method: {value}", field_name="method")
        self.value = value


class SnapshotIOError(LitesnapError):
    """Filesystem or external-process failure.

    Raised when:
    - A copy or engine command fails (permission denied, disk full)
    - An engine command is missing or exits non-zero
    """

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(
            message,
            code="IO_ERROR",
            details={"path": str(path) if path else None, "returncode": returncode},
        )
        self.path = path
        self.returncode = returncode


class IntegrityError(LitesnapError):
    """A database file failed its integrity check."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(
            message,
            code="INTEGRITY_ERROR",
            details={"path": str(path) if path else None},
        )
        self.path = path


__all__ = [
    "LitesnapError",
    "ConfigError",
    "UnknownStrategyError",
    "SnapshotIOError",
    "IntegrityError",
]
