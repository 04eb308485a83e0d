from __future__ import annotations

import pytest

from reclaimer.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_selling_partner_config,
    region_for_marketplace,
)

_CREDENTIALS = {
    "AMAZON_CLIENT_ID": "client-id",
    "AMAZON_CLIENT_SECRET": "client-secret",
    "AMAZON_REFRESH_TOKEN": "refresh-token",
}


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in _CREDENTIALS.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("AMAZON_SANDBOX", raising=False)


def test_region_for_marketplace() -> None:
    assert region_for_marketplace("ATVPDKIKX0DER") == "na"
    assert region_for_marketplace("A1PA6795UKMFR9") == "eu"
    assert region_for_marketplace("A1VC38T7YXB528") == "fe"


def test_region_for_unknown_marketplace() -> None:
    with pytest.raises(ConfigurationError, match="NOPE"):
        region_for_marketplace("NOPE")


@pytest.mark.usefixtures("credentials")
def test_selling_partner_config_selects_regional_endpoint(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("AMAZON_MARKETPLACE_ID", "A1PA6795UKMFR9")

    config = get_selling_partner_config()

    assert config.client_id == "client-id"
    assert config.region == "eu"
    assert config.endpoint == "https://sellingpartnerapi-eu.amazon.com"
    assert config.resilience.base_url == config.endpoint
    assert config.resilience.ratelimit is not None
    assert config.resilience.cache is None


@pytest.mark.usefixtures("credentials")
def test_selling_partner_config_sandbox(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMAZON_MARKETPLACE_ID", "ATVPDKIKX0DER")
    monkeypatch.setenv("AMAZON_SANDBOX", "true")

    config = get_selling_partner_config(cache_predicate=lambda payload: payload is not None)

    assert config.sandbox is True
    assert config.endpoint == "https://sandbox.sellingpartnerapi-na.amazon.com"
    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "memory"


def test_selling_partner_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (*_CREDENTIALS, "AMAZON_MARKETPLACE_ID"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        get_selling_partner_config()

    assert "AMAZON_REFRESH_TOKEN" in str(exc.value)
