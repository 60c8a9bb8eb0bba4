"""
Retention module for litesnap.

Age- or count-based cleanup of the snapshot directory, best-effort across
the selected set.
"""

from .policy import RetentionEngine, RetentionPolicy, RetentionResult

__all__ = ["RetentionEngine", "RetentionPolicy", "RetentionResult"]
