from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from reclaimer.config import (
    ConfigurationError,
    DataPaths,
    SyncConfig,
    data_paths,
    default_database_uri,
    get_sync_config,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_data_paths_use_env_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RECLAIMER_DATA_DIR", str(tmp_path / "data"))

    paths = data_paths()

    assert paths == DataPaths.under(tmp_path / "data")
    assert paths.database == (tmp_path / "data" / "reclaimer.db").resolve()
    assert paths.http_cache.name == "http_cache.db"
    assert (tmp_path / "data").is_dir()


def test_data_paths_fall_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("RECLAIMER_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert data_paths().root == (tmp_path / "reclaimer").resolve()


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert default_database_uri() == "sqlite+pysqlite:///:memory:"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("RECLAIMER_DATA_DIR", str(tmp_path))

    database = (tmp_path / "reclaimer.db").resolve()

    assert default_database_uri() == f"sqlite+pysqlite:///{database}"


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RECLAIMER_POLL_INTERVAL_SECONDS",
        "RECLAIMER_POLL_TIMEOUT_SECONDS",
        "RECLAIMER_WAITING_PERIOD_DAYS",
        "RECLAIMER_LOOKBACK_DAYS",
        "RECLAIMER_SETTLE_DAYS",
        "RECLAIMER_RETENTION_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_sync_config()

    assert config == SyncConfig()
    assert config.waiting_period == timedelta(days=7)
    assert config.lookback == timedelta(days=90)
    assert config.settle == timedelta(days=3)
    assert config.poll_timeout_seconds == 300.0


def test_sync_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECLAIMER_WAITING_PERIOD_DAYS", "14")
    monkeypatch.setenv("RECLAIMER_POLL_INTERVAL_SECONDS", "0.5")

    config = get_sync_config()

    assert config.waiting_period == timedelta(days=14)
    assert config.poll_interval_seconds == 0.5


def test_sync_config_rejects_invalid_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECLAIMER_RETENTION_DAYS", "forever")

    with pytest.raises(ConfigurationError):
        get_sync_config()
