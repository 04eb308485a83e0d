"""Selling Partner API report provider."""

from __future__ import annotations

import asyncio
import gzip
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from reclaimer import __version__
from reclaimer.adapters.http_resilience import ResilientClient
from reclaimer.config import get_selling_partner_config
from reclaimer.domain.errors import ErrorKind, UpstreamError
from reclaimer.domain.ports.reports import ReportStatusResult

from .schema import (
    CreateReportResponse,
    ErrorList,
    ReportDocumentPayload,
    ReportPayload,
    TokenResponse,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from reclaimer.config import ResilienceConfig, SellingPartnerConfig
    from reclaimer.domain.model import ReportType
    from reclaimer.domain.ports.reports import ReportProvider
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)

REPORTS_PATH = "/reports/2021-06-30/reports"
DOCUMENTS_PATH = "/reports/2021-06-30/documents"
ACCESS_TOKEN_HEADER = "x-amz-access-token"
# refresh a little before the provider expires the token
_TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)


def should_cache_payload(payload: object) -> bool:
    """Only report-document metadata is stable enough to cache."""

    return isinstance(payload, dict) and "url" in payload and "processingStatus" not in payload


def _default_config() -> SellingPartnerConfig:
    return get_selling_partner_config(cache_predicate=should_cache_payload)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _kind_for_status(status_code: int) -> ErrorKind:
    if status_code in {401, 403}:
        return ErrorKind.AUTHENTICATION
    if status_code == 429:
        return ErrorKind.THROTTLED
    if status_code >= 500:
        return ErrorKind.CONNECTION
    return ErrorKind.PROCESSING


def _error_detail(response: httpx.Response) -> str:
    try:
        return ErrorList.model_validate(response.json()).describe() or response.reason_phrase
    except (ValueError, ValidationError):
        return response.reason_phrase


@dataclass(slots=True)
class _AccessToken:
    value: str
    expires_at: datetime


@dataclass(slots=True)
class SellingPartnerReportProvider:
    """Synchronous facade over the async Reports API calls."""

    config: SellingPartnerConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    clock: Clock = field(default=_utcnow)
    _token: _AccessToken | None = field(default=None, init=False, repr=False)

    def create_report(self, report_type: ReportType, start: datetime, end: datetime) -> str | None:
        return asyncio.run(self._create_report_async(report_type, start, end))

    def get_report_status(self, report_id: str) -> ReportStatusResult:
        return asyncio.run(self._get_report_status_async(report_id))

    def download_report(self, document_id: str) -> str:
        return asyncio.run(self._download_report_async(document_id))

    async def _create_report_async(
        self, report_type: ReportType, start: datetime, end: datetime
    ) -> str | None:
        body = {
            "reportType": report_type.value,
            "marketplaceIds": [self.config.marketplace_id],
            "dataStartTime": _format_timestamp(start),
            "dataEndTime": _format_timestamp(end),
        }
        async with self.client_factory(self.config.resilience) as client:
            headers = await self._auth_headers(client)
            response = await self._call(
                "create report",
                client.post(self._url(REPORTS_PATH), json=body, headers=headers),
            )
        payload = CreateReportResponse.model_validate(response.json())
        log.info(f"Requested {report_type.value} report: {payload.report_id}")
        return payload.report_id

    async def _get_report_status_async(self, report_id: str) -> ReportStatusResult:
        async with self.client_factory(self.config.resilience) as client:
            headers = await self._auth_headers(client)
            response = await self._call(
                "get report",
                client.get(self._url(f"{REPORTS_PATH}/{report_id}"), headers=headers),
            )
        payload = ReportPayload.model_validate(response.json())
        log.debug(f"Report {report_id} is {payload.processing_status.value}")
        return ReportStatusResult(
            status=payload.processing_status, document_id=payload.report_document_id
        )

    async def _download_report_async(self, document_id: str) -> str:
        async with self.client_factory(self.config.resilience) as client:
            headers = await self._auth_headers(client)
            response = await self._call(
                "get report document",
                client.get(self._url(f"{DOCUMENTS_PATH}/{document_id}"), headers=headers),
            )
            document = ReportDocumentPayload.model_validate(response.json())
            # the document url is pre-signed; it must not carry the access token
            content_response = await self._call("download report", client.get(document.url))

        content = content_response.content
        if (document.compression_algorithm or "").upper() == "GZIP":
            try:
                content = gzip.decompress(content)
            except (OSError, EOFError) as exc:
                raise UpstreamError(
                    f"Report document {document_id} is not valid gzip data",
                    kind=ErrorKind.PROCESSING,
                ) from exc
        log.info(f"Downloaded report document {document_id} ({len(content)} bytes)")
        return content.decode("utf-8", errors="replace")

    async def _auth_headers(self, client: ResilientClient) -> dict[str, str]:
        token = await self._access_token(client)
        return {
            ACCESS_TOKEN_HEADER: token,
            "user-agent": f"reclaimer/{__version__}",
        }

    async def _access_token(self, client: ResilientClient) -> str:
        now = self.clock()
        if self._token is not None and now < self._token.expires_at:
            return self._token.value

        form = {
            "grant_type": "refresh_token",
            "refresh_token": self.config.refresh_token,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        response = await self._call(
            "exchange refresh token", client.post(self.config.token_url, data=form)
        )
        token = TokenResponse.model_validate(response.json())
        expires_at = now + timedelta(seconds=token.expires_in) - _TOKEN_EXPIRY_MARGIN
        self._token = _AccessToken(value=token.access_token, expires_at=expires_at)
        log.debug("Obtained Selling Partner access token")
        return token.access_token

    def _url(self, path: str) -> str:
        base = self.config.resilience.base_url or self.config.endpoint
        return f"{base.rstrip('/')}{path}"

    async def _call(self, operation: str, request: Awaitable[httpx.Response]) -> httpx.Response:
        try:
            response = await request
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"{operation} timed out", kind=ErrorKind.TIMEOUT) from exc
        except httpx.TransportError as exc:
            raise UpstreamError(f"{operation} failed: {exc}", kind=ErrorKind.CONNECTION) from exc

        if response.is_success:
            return response
        kind = _kind_for_status(response.status_code)
        detail = _error_detail(response)
        log.error(f"Selling Partner API {operation} failed ({response.status_code}): {detail}")
        raise UpstreamError(f"{operation} failed with {response.status_code}: {detail}", kind=kind)


if TYPE_CHECKING:
    _provider_check: ReportProvider = SellingPartnerReportProvider()
