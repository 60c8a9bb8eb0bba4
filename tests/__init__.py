"""
litesnap Test Suite.

This package contains:
- unit/: Unit tests per module (real SQLite files in temp directories)
- integration/: Manager and CLI flows end to end
"""
