from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from reclaimer.domain.time_windows import TimeWindow, ensure_aware, start_of_day
from tests.helpers.reconciliation import FIXED_NOW, fixed_clock


def test_defaults_end_before_now_and_span_lookback() -> None:
    start, end = TimeWindow(lookback=timedelta(days=30)).resolve(clock=fixed_clock())

    assert end == FIXED_NOW - timedelta(days=3)
    assert start == end - timedelta(days=30)


def test_explicit_bounds_are_normalised_to_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    window = TimeWindow(
        start=datetime(2025, 1, 1, 2, 0, tzinfo=plus_two),
        end=datetime(2025, 1, 2, tzinfo=UTC),
    )

    start, end = window.resolve(clock=fixed_clock())

    assert start == datetime(2025, 1, 1, 0, 0, tzinfo=UTC)
    assert start.tzinfo is UTC
    assert end == datetime(2025, 1, 2, tzinfo=UTC)


def test_start_only_window_ends_at_settled_now() -> None:
    start, end = TimeWindow(start=datetime(2025, 6, 1, tzinfo=UTC), settle=timedelta(0)).resolve(
        clock=fixed_clock()
    )

    assert start == datetime(2025, 6, 1, tzinfo=UTC)
    assert end == FIXED_NOW


def test_rejects_inverted_and_naive_windows() -> None:
    with pytest.raises(ValueError, match="before end"):
        TimeWindow(
            start=datetime(2025, 2, 1, tzinfo=UTC), end=datetime(2025, 1, 1, tzinfo=UTC)
        ).resolve()
    with pytest.raises(ValueError, match="timezone"):
        TimeWindow(start=datetime(2025, 2, 1)).resolve()  # noqa: DTZ001
    with pytest.raises(ValueError, match="non-negative"):
        TimeWindow(lookback=timedelta(days=-1)).resolve()


def test_helpers() -> None:
    assert ensure_aware(None) is None
    assert start_of_day(datetime(2025, 3, 4, 17, 45, 12, tzinfo=UTC)) == datetime(
        2025, 3, 4, tzinfo=UTC
    )
