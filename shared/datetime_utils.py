"""
Date/time helpers — framework-agnostic.

Every timestamp the services compare is timezone-aware UTC; stored values
that come back naive are assumed to be UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current time as an aware UTC ``datetime``."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC ``datetime``.

    Naive datetimes (no ``tzinfo``) are assumed to be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
