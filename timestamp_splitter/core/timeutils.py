"""Pure time utility helpers used by the timestamp parser and the CLI."""
from __future__ import annotations


class LiteralFormatError(ValueError):
    """Raised when a time literal is not ``MM:SS`` or ``HH:MM:SS``."""


def parse_time_literal(text: str) -> int:
    """Convert a time literal to whole seconds.

    Accepts ``"M:SS"`` (minutes, seconds) and ``"H:MM:SS"``. Groups are not
    range checked, so ``"75:00"`` is 4500 seconds.
    """
    parts = text.strip().split(':')
    if not all(p.isdigit() for p in parts):
        raise LiteralFormatError(
            f"Invalid time '{text}': use MM:SS or HH:MM:SS"
        )
    values = [int(p) for p in parts]
    if len(values) == 2:
        minutes, seconds = values
        return minutes * 60 + seconds
    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    raise LiteralFormatError(
        f"Invalid time '{text}': use MM:SS or HH:MM:SS"
    )


def format_clock(seconds: float) -> str:
    """Format seconds as ``M:SS`` or ``H:MM:SS`` (fractions are dropped)."""
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_seconds(seconds: float) -> str:
    """Format a duration in seconds as ``HH:MM:SS.mmm``.

    Keeps the sign for negative values, rounds milliseconds to 3 digits.
    """
    import math

    sign = '-' if seconds < 0 else ''
    s = abs(seconds)
    hours = int(s // 3600)
    minutes = int((s % 3600) // 60)
    secs = int(s % 60)
    millis = int(round((s - math.floor(s)) * 1000))
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
