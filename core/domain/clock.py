"""
Time helpers.

The store keeps naive UTC timestamps. Everything entering the domain
is normalised with ``to_naive_utc`` so comparisons against stored
deadlines are always like-for-like.
"""
from datetime import datetime, timezone
from typing import Callable, Optional


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def hours_until(deadline: datetime, now: datetime) -> int:
    """Whole hours from ``now`` to ``deadline``, rounded, never negative."""
    seconds = (to_naive_utc(deadline) - to_naive_utc(now)).total_seconds()
    return max(0, round(seconds / 3600))
