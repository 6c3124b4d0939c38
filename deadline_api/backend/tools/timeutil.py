"""UTC clock helpers shared by the deadline and submission services.

Timestamps are stored naive in UTC. Anything coming from a request is
normalized with :func:`to_utc_naive` before it is compared or persisted.
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach the UTC offset to a stored timestamp for serialization."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def is_future(value: datetime, now: Optional[datetime] = None) -> bool:
    return to_utc_naive(value) > (now or utcnow())


def seconds_past(cutoff: datetime, now: datetime) -> int:
    """Whole seconds elapsed since ``cutoff`` (floored, never negative)."""
    return max(0, int((now - cutoff).total_seconds()))
