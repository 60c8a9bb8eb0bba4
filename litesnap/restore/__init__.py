"""
Restore module for litesnap.

Reinstates a snapshot over the live database with optional pre-verification
and a pre-restore safety copy.
"""

from .orchestrator import RestoreOrchestrator, RestoreRequest, RestoreResult

__all__ = ["RestoreOrchestrator", "RestoreRequest", "RestoreResult"]
