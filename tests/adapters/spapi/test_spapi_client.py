from __future__ import annotations

import gzip
import json
from collections.abc import Callable  # noqa: TC003
from datetime import datetime, timedelta

import httpx
import pytest

from reclaimer.adapters.http_resilience import ResilientClient
from reclaimer.adapters.spapi import SellingPartnerReportProvider, should_cache_payload
from reclaimer.config import SellingPartnerConfig
from reclaimer.config.http_resilience import ResilienceConfig
from reclaimer.config.marketplace import LWA_TOKEN_URL, default_spapi_resilience
from reclaimer.domain.errors import ErrorKind, UpstreamError
from reclaimer.domain.model import ReportStatus, ReportType
from tests.helpers.reconciliation import FIXED_NOW, days_ago

ENDPOINT = "https://sellingpartnerapi-na.amazon.com"

type Handler = Callable[[httpx.Request], httpx.Response]


def _make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


class _Clock:
    def __init__(self) -> None:
        self.now = FIXED_NOW

    def __call__(self) -> datetime:
        return self.now


class _Api:
    """Routes requests the way the Reports API and the token endpoint would answer them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.routes: dict[tuple[str, str], httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == LWA_TOKEN_URL:
            self.token_calls += 1
            return httpx.Response(
                200, json={"access_token": f"token-{self.token_calls}", "expires_in": 3600}
            )
        try:
            template = self.routes[request.method, url]
        except KeyError:
            return httpx.Response(404, json={"errors": [{"code": "NotFound", "message": url}]})
        # a fresh response per call so bodies can be read again
        return httpx.Response(
            template.status_code, headers=template.headers, content=template.content
        )


def _provider(api: _Api, clock: _Clock | None = None) -> SellingPartnerReportProvider:
    config = SellingPartnerConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        marketplace_id="ATVPDKIKX0DER",
        resilience=default_spapi_resilience(endpoint=ENDPOINT),
    )
    return SellingPartnerReportProvider(
        config=config,
        client_factory=_make_client_factory(api),
        clock=clock or _Clock(),
    )


def test_create_report_posts_window_and_marketplace() -> None:
    api = _Api()
    api.routes["POST", f"{ENDPOINT}/reports/2021-06-30/reports"] = httpx.Response(
        202, json={"reportId": "rep-1"}
    )
    provider = _provider(api)

    report_id = provider.create_report(
        ReportType.INVENTORY_LEDGER, days_ago(30), days_ago(3)
    )

    assert report_id == "rep-1"
    token_request, create_request = api.requests
    assert b"grant_type=refresh_token" in token_request.content
    assert create_request.headers["x-amz-access-token"] == "token-1"
    body = json.loads(create_request.content)
    assert body["reportType"] == "GET_LEDGER_DETAIL_VIEW_DATA"
    assert body["marketplaceIds"] == ["ATVPDKIKX0DER"]
    assert body["dataStartTime"] == "2025-05-31T12:00:00Z"
    assert body["dataEndTime"] == "2025-06-27T12:00:00Z"


def test_create_report_without_id_returns_none() -> None:
    api = _Api()
    api.routes["POST", f"{ENDPOINT}/reports/2021-06-30/reports"] = httpx.Response(202, json={})

    report_id = _provider(api).create_report(ReportType.REIMBURSEMENTS, days_ago(2), days_ago(1))

    assert report_id is None


def test_access_token_is_reused_until_it_expires() -> None:
    api = _Api()
    api.routes["GET", f"{ENDPOINT}/reports/2021-06-30/reports/rep-1"] = httpx.Response(
        200,
        json={
            "reportId": "rep-1",
            "reportType": "GET_LEDGER_DETAIL_VIEW_DATA",
            "processingStatus": "IN_PROGRESS",
        },
    )
    clock = _Clock()
    provider = _provider(api, clock)

    provider.get_report_status("rep-1")
    provider.get_report_status("rep-1")
    assert api.token_calls == 1

    clock.now = FIXED_NOW + timedelta(hours=1)
    provider.get_report_status("rep-1")
    assert api.token_calls == 2
    assert api.requests[-1].headers["x-amz-access-token"] == "token-2"


def test_get_report_status_maps_payload() -> None:
    api = _Api()
    api.routes["GET", f"{ENDPOINT}/reports/2021-06-30/reports/rep-9"] = httpx.Response(
        200,
        json={
            "reportId": "rep-9",
            "reportType": "GET_FBA_REIMBURSEMENTS_DATA",
            "processingStatus": "DONE",
            "reportDocumentId": "doc-9",
        },
    )

    result = _provider(api).get_report_status("rep-9")

    assert result.status is ReportStatus.DONE
    assert result.document_id == "doc-9"


def _document_routes(api: _Api, content: bytes, *, compression: str | None) -> None:
    document: dict[str, object] = {
        "reportDocumentId": "doc-1",
        "url": "https://tortuga-prod-na.s3.amazonaws.com/doc-1",
    }
    if compression is not None:
        document["compressionAlgorithm"] = compression
    api.routes["GET", f"{ENDPOINT}/reports/2021-06-30/documents/doc-1"] = httpx.Response(
        200, json=document
    )
    api.routes["GET", "https://tortuga-prod-na.s3.amazonaws.com/doc-1"] = httpx.Response(
        200, content=content
    )


def test_download_report_decompresses_gzip() -> None:
    api = _Api()
    _document_routes(api, gzip.compress("sku\tfnsku\nSKU-1\tX00\n".encode()), compression="GZIP")

    text = _provider(api).download_report("doc-1")

    assert text == "sku\tfnsku\nSKU-1\tX00\n"
    assert "x-amz-access-token" not in api.requests[-1].headers


def test_download_report_plain_text() -> None:
    api = _Api()
    _document_routes(api, b"a\tb\n1\t2\n", compression=None)

    assert _provider(api).download_report("doc-1") == "a\tb\n1\t2\n"


def test_download_report_with_corrupt_gzip_is_a_processing_error() -> None:
    api = _Api()
    _document_routes(api, b"definitely not gzip", compression="GZIP")

    with pytest.raises(UpstreamError) as exc:
        _provider(api).download_report("doc-1")

    assert exc.value.kind is ErrorKind.PROCESSING


@pytest.mark.parametrize(
    ("status_code", "kind"),
    [
        (401, ErrorKind.AUTHENTICATION),
        (403, ErrorKind.AUTHENTICATION),
        (429, ErrorKind.THROTTLED),
        (503, ErrorKind.CONNECTION),
        (400, ErrorKind.PROCESSING),
    ],
)
def test_http_errors_map_to_error_kinds(status_code: int, kind: ErrorKind) -> None:
    api = _Api()
    api.routes["GET", f"{ENDPOINT}/reports/2021-06-30/reports/rep-1"] = httpx.Response(
        status_code, json={"errors": [{"code": "Failure", "message": "nope"}]}
    )

    with pytest.raises(UpstreamError) as exc:
        _provider(api).get_report_status("rep-1")

    assert exc.value.kind is kind
    assert "Failure: nope" in str(exc.value)


def test_transport_timeout_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    config = SellingPartnerConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        marketplace_id="ATVPDKIKX0DER",
        resilience=default_spapi_resilience(endpoint=ENDPOINT),
    )
    provider = SellingPartnerReportProvider(
        config=config, client_factory=_make_client_factory(handler), clock=_Clock()
    )

    with pytest.raises(UpstreamError) as exc:
        provider.get_report_status("rep-1")

    assert exc.value.kind is ErrorKind.TIMEOUT
    assert exc.value.kind.is_transient


def test_should_cache_payload_only_accepts_document_metadata() -> None:
    assert should_cache_payload({"reportDocumentId": "doc-1", "url": "https://example"})
    assert not should_cache_payload({"reportId": "rep-1", "processingStatus": "DONE"})
    assert not should_cache_payload({"url": "https://example", "processingStatus": "DONE"})
    assert not should_cache_payload(["url"])
