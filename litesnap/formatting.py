"""Human-readable size and duration strings for CLI output."""

from __future__ import annotations

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_size(num_bytes: int) -> str:
    """Format a byte count, e.g. ``1536 -> "1.50 KB"``."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {_SIZE_UNITS[index]}"


def format_duration(milliseconds: int | float) -> str:
    """Format a duration, e.g. ``500 -> "500ms"``, ``5000 -> "5.00s"``."""
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    if milliseconds < 60000:
        return f"{milliseconds / 1000:.2f}s"
    return f"{milliseconds / 60000:.2f}m"
