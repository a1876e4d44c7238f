"""Shared utilities for Silver Core ETL."""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """Render an entity refresh time for log lines.

    Sub-second times are shown in milliseconds, anything under a minute with
    one decimal, longer runs rounded to whole seconds (or minutes past an
    hour).

    Examples:
        >>> format_duration(0.25)
        '250ms'
        >>> format_duration(45.2)
        '45.2s'
        >>> format_duration(185)
        '3m 05s'
        >>> format_duration(3725)
        '1h 02m'
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"
