"""Clock helpers shared by the time-sensitive pipeline stages."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, reading naive timestamps as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def age_in_hours(timestamp: datetime, now: datetime) -> int:
    """Whole hours elapsed between ``timestamp`` and ``now`` (negative for future)."""

    delta = as_utc(now) - as_utc(timestamp)
    return int(delta.total_seconds() // 3600)


__all__ = ["Clock", "age_in_hours", "as_utc", "utcnow"]
