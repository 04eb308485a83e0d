"""Selling Partner API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from .env import env_flag, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook

type Region = Literal["na", "eu", "fe"]

LWA_TOKEN_URL: Final[str] = "https://api.amazon.com/auth/o2/token"
SPAPI_TIMEOUT_SECONDS: Final[float] = 30.0

REGION_ENDPOINTS: Final[dict[Region, str]] = {
    "na": "https://sellingpartnerapi-na.amazon.com",
    "eu": "https://sellingpartnerapi-eu.amazon.com",
    "fe": "https://sellingpartnerapi-fe.amazon.com",
}

SANDBOX_ENDPOINTS: Final[dict[Region, str]] = {
    "na": "https://sandbox.sellingpartnerapi-na.amazon.com",
    "eu": "https://sandbox.sellingpartnerapi-eu.amazon.com",
    "fe": "https://sandbox.sellingpartnerapi-fe.amazon.com",
}

MARKETPLACE_REGIONS: Final[dict[str, Region]] = {
    "ATVPDKIKX0DER": "na",  # US
    "A2EUQ1WTGCTBG2": "na",  # CA
    "A1AM78C64UM0Y8": "na",  # MX
    "A2Q3Y263D00KWC": "na",  # BR
    "A1F83G8C2ARO7P": "eu",  # UK
    "A1PA6795UKMFR9": "eu",  # DE
    "A13V1IB3VIYZZH": "eu",  # FR
    "APJ6JRA9NG5V4": "eu",  # IT
    "A1RKKUPIHCS9HS": "eu",  # ES
    "A1805IZSGTT6HS": "eu",  # NL
    "A2NODRKZP88ZB9": "eu",  # SE
    "A1C3SOZRARQ6R3": "eu",  # PL
    "AMEN7PMS3EDWL": "eu",  # BE
    "A33AVAJ2PDY3EV": "eu",  # TR
    "A17E79C6D8DWNP": "eu",  # SA
    "A2VIGQ35RCS4UG": "eu",  # AE
    "ARBP9OOSHTCHU": "eu",  # EG
    "A21TJRUUN4KGV": "eu",  # IN
    "A1VC38T7YXB528": "fe",  # JP
    "A39IBJ37TRP1C6": "fe",  # AU
    "A19VAU5U5O7RUS": "fe",  # SG
}


def region_for_marketplace(marketplace_id: str) -> Region:
    try:
        return MARKETPLACE_REGIONS[marketplace_id]
    except KeyError:
        raise ConfigurationError(f"Unknown marketplace id: {marketplace_id}") from None


@dataclass(frozen=True, slots=True)
class SellingPartnerConfig:
    """Credentials and endpoint selection for the Selling Partner API."""

    client_id: str
    client_secret: str
    refresh_token: str
    marketplace_id: str
    resilience: ResilienceConfig
    sandbox: bool = False
    token_url: str = LWA_TOKEN_URL

    @property
    def region(self) -> Region:
        return region_for_marketplace(self.marketplace_id)

    @property
    def endpoint(self) -> str:
        endpoints = SANDBOX_ENDPOINTS if self.sandbox else REGION_ENDPOINTS
        return endpoints[self.region]


def default_spapi_resilience(
    *,
    endpoint: str | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> ResilienceConfig:
    # reports API allows a burst of 15 with a slow refill; stay well below it
    return ResilienceConfig(
        name="spapi",
        base_url=endpoint,
        timeout_seconds=SPAPI_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        cache=CacheConfig(
            backend="memory",
            default_ttl_seconds=240.0,
            should_cache=cache_predicate,
        )
        if cache_predicate is not None
        else None,
    )


def get_selling_partner_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> SellingPartnerConfig:
    values = require_env_vars(
        (
            "AMAZON_CLIENT_ID",
            "AMAZON_CLIENT_SECRET",
            "AMAZON_REFRESH_TOKEN",
            "AMAZON_MARKETPLACE_ID",
        )
    )
    marketplace_id = values["AMAZON_MARKETPLACE_ID"]
    region = region_for_marketplace(marketplace_id)
    sandbox = env_flag("AMAZON_SANDBOX")
    endpoint = (SANDBOX_ENDPOINTS if sandbox else REGION_ENDPOINTS)[region]
    return SellingPartnerConfig(
        client_id=values["AMAZON_CLIENT_ID"],
        client_secret=values["AMAZON_CLIENT_SECRET"],
        refresh_token=values["AMAZON_REFRESH_TOKEN"],
        marketplace_id=marketplace_id,
        sandbox=sandbox,
        resilience=resilience
        or default_spapi_resilience(endpoint=endpoint, cache_predicate=cache_predicate),
    )
