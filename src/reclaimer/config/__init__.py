"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .marketplace import (
    SellingPartnerConfig,
    default_spapi_resilience,
    get_selling_partner_config,
    region_for_marketplace,
)
from .storage import DataPaths, data_paths, default_database_uri
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DataPaths",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SellingPartnerConfig",
    "SyncConfig",
    "configure_logging",
    "data_paths",
    "default_database_uri",
    "default_spapi_resilience",
    "env_flag",
    "env_float",
    "env_int",
    "get_selling_partner_config",
    "get_sync_config",
    "region_for_marketplace",
    "require_env_vars",
]
