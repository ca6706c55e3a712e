"""Core utility functions."""
from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Get current UTC datetime with timezone info. Always use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware (UTC).

    SQLite stores datetimes without timezone info, so we need to make them
    aware before comparing with utcnow().

    Args:
        dt: A datetime that may or may not be timezone-aware.

    Returns:
        Timezone-aware datetime in UTC, or None if input was None.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Assume naive datetimes are UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt


def generate_unique_key() -> str:
    """Generate a unique random key (used as opaque record id)."""
    return uuid.uuid4().hex


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2).

    Unlike round(), which rounds halves to even.
    """
    return int(math.floor(value + 0.5))


__all__ = ["utcnow", "ensure_aware", "generate_unique_key", "round_half_up"]
