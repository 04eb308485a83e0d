"""Defaults for report syncs, status refreshes and retention."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int

DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_POLL_TIMEOUT_SECONDS = 300.0
DEFAULT_WAITING_PERIOD_DAYS = 7
DEFAULT_LOOKBACK_DAYS = 90
# the provider finalises ledger rows a few days after the fact
DEFAULT_SETTLE_DAYS = 3
DEFAULT_RETENTION_DAYS = 90


@dataclass(frozen=True, slots=True)
class SyncConfig:
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    poll_timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS
    waiting_period_days: int = DEFAULT_WAITING_PERIOD_DAYS
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    settle_days: int = DEFAULT_SETTLE_DAYS
    retention_days: int = DEFAULT_RETENTION_DAYS

    @property
    def waiting_period(self) -> timedelta:
        return timedelta(days=self.waiting_period_days)

    @property
    def lookback(self) -> timedelta:
        return timedelta(days=self.lookback_days)

    @property
    def settle(self) -> timedelta:
        return timedelta(days=self.settle_days)


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        poll_interval_seconds=env_float(
            "RECLAIMER_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS
        ),
        poll_timeout_seconds=env_float(
            "RECLAIMER_POLL_TIMEOUT_SECONDS", DEFAULT_POLL_TIMEOUT_SECONDS
        ),
        waiting_period_days=env_int("RECLAIMER_WAITING_PERIOD_DAYS", DEFAULT_WAITING_PERIOD_DAYS),
        lookback_days=env_int("RECLAIMER_LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS),
        settle_days=env_int("RECLAIMER_SETTLE_DAYS", DEFAULT_SETTLE_DAYS),
        retention_days=env_int("RECLAIMER_RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
    )
