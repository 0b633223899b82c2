"""Display helpers for post listings."""

from __future__ import annotations

import math
from datetime import UTC, datetime

WORDS_PER_MINUTE = 200


def calculate_reading_time(content: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated reading time in whole minutes, never less than one."""
    words = len(content.split())
    return max(1, math.ceil(words / words_per_minute))


def format_date(value: datetime, style: str = "full") -> str:
    """Format a timestamp as ``February 3, 2026`` or ``2026.02.03``."""
    if style == "short":
        return value.strftime("%Y.%m.%d")
    if style == "full":
        return f"{value.strftime('%B')} {value.day}, {value.year}"
    raise ValueError(f"Unknown date style: {style!r}")


def _ago(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def relative_time(value: datetime, now: datetime | None = None) -> str:
    """Human-friendly age such as ``just now`` or ``3 days ago``."""
    if now is None:
        now = datetime.now(tz=UTC)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    seconds = int((now - value).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return _ago(minutes, "minute")
    if hours < 24:
        return _ago(hours, "hour")
    if days < 7:
        return _ago(days, "day")
    if days // 7 < 4:
        return _ago(days // 7, "week")
    if days // 30 < 12:
        return _ago(max(1, days // 30), "month")
    return _ago(max(1, days // 365), "year")
