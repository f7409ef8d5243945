"""
ISO-8601 instant helpers.

Every timestamp the ledger writes (deal dates, export dates) uses the same
UTC, millisecond-precision form, e.g. ``2025-03-01T00:00:00.000Z``. A uniform
form keeps lexical ``ORDER BY date`` in agreement with chronological order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """Format ``value`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = to_utc(value)
    # strftime("%Y") does not zero-pad years below 1000 on every platform.
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}T"
        f"{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}.{utc.microsecond // 1000:03d}Z"
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_instant(now: Optional[datetime] = None) -> str:
    """Current time (or ``now``) as an ISO-8601 instant string."""
    return format_instant(now or utc_now())


__all__ = ["to_utc", "format_instant", "utc_now", "now_instant"]
