"""Utilities for resolving the report window of a sync run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_LOOKBACK = timedelta(days=90)
DEFAULT_SETTLE = timedelta(days=3)


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value.astimezone(UTC)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` window requested from the report provider.

    Missing bounds are filled in relative to the clock: the end defaults to
    ``now - settle`` (recent ledger rows are still being reconciled upstream)
    and the start defaults to ``end - lookback``.
    """

    start: datetime | None = None
    end: datetime | None = None
    lookback: timedelta = DEFAULT_LOOKBACK
    settle: timedelta = DEFAULT_SETTLE

    def resolve(self, *, clock: Clock = utcnow) -> tuple[datetime, datetime]:
        """Resolve the window into concrete UTC timestamps."""

        if self.lookback < timedelta(0) or self.settle < timedelta(0):
            raise ValueError("Lookback and settle durations must be non-negative")

        resolved_start = ensure_aware(self.start)
        resolved_end = ensure_aware(self.end)

        if resolved_end is None:
            anchor = clock()
            if anchor.tzinfo is None:
                anchor = anchor.replace(tzinfo=UTC)
            resolved_end = anchor.astimezone(UTC) - self.settle
        if resolved_start is None:
            resolved_start = resolved_end - self.lookback

        if resolved_start >= resolved_end:
            raise ValueError("Time window start must be before end")

        return resolved_start, resolved_end


__all__ = ["Clock", "TimeWindow", "ensure_aware", "start_of_day", "utcnow"]
