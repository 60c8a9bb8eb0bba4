"""
Test helpers for building SQLite databases on disk.
"""

import os
import sqlite3
from pathlib import Path


def create_database(path: Path, rows: int = 2) -> Path:
    """Create a SQLite database with one table and the given number of rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        conn.executemany(
            "INSERT INTO items (name) VALUES (?)",
            [(f"item-{i}",) for i in range(rows)],
        )
        conn.commit()
    finally:
        conn.close()
    return path


def count_rows(path: Path) -> int:
    conn = sqlite3.connect(str(path))
    try:
        return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]
    finally:
        conn.close()


def corrupt_header(path: Path) -> Path:
    """Overwrite the SQLite magic header so the engine rejects the file."""
    data = bytearray(path.read_bytes())
    data[:16] = b"not a database!!"
    path.write_bytes(bytes(data))
    return path


def set_mtime(path: Path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))
