"""Where the operator-side engine reads reports from."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from reportpay.core.config import settings
from reportpay.models.report import ReportStatus
from reportpay.schemas.report import ReportResponse
from reportpay.services.payment_errors import (
    AuthorizationError,
    PaymentRejectedError,
    TransientError,
)
from reportpay.services.report_query_service import ReportQueryService

logger = logging.getLogger(__name__)

REPORTS_PATH = "/v1/reports"
PAGE_SIZE = 500


class ReportSource(Protocol):
    async def list_reports(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> list[ReportResponse]: ...


class HttpReportSource:
    """Reads every matching report from ``GET /v1/reports``, page by page."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.PAYMENT_AUTHORITY_URL
        self.timeout = timeout or settings.PAYMENT_AUTHORITY_TIMEOUT
        self.headers = headers or {}
        self._transport = transport

    async def list_reports(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> list[ReportResponse]:
        params: dict[str, Any] = {"limit": PAGE_SIZE, "order_by": "signed_at:asc"}
        if practitioner_id:
            params["practitioner_id"] = str(practitioner_id)
        if status:
            params["status"] = status.value
        if signed_from:
            params["signed_from"] = signed_from.isoformat()
        if signed_to:
            params["signed_to"] = signed_to.isoformat()

        reports: list[ReportResponse] = []
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                while True:
                    response = await client.get(
                        f"{REPORTS_PATH}/",
                        params={**params, "skip": len(reports)},
                        headers={**self.headers, "X-Tenant-Id": str(tenant_id)},
                    )
                    if response.status_code in (401, 403):
                        raise AuthorizationError(response.status_code)
                    response.raise_for_status()
                    page = [ReportResponse.model_validate(item) for item in response.json()]
                    reports.extend(page)
                    if len(page) < PAGE_SIZE:
                        break
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error("Report listing failed: %s", status_code)
            if status_code >= 500:
                raise TransientError(f"Report listing failed ({status_code})") from e
            raise PaymentRejectedError(status_code, e.response.text) from e
        except httpx.TransportError as e:
            logger.warning("Report listing failed in transport: %s", e)
            raise TransientError(f"Report source unreachable: {e}") from e

        logger.debug("Fetched %d reports for tenant %s", len(reports), tenant_id)
        return reports


class LocalReportSource:
    """Reads reports straight from the database in the same process."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def list_reports(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> list[ReportResponse]:
        reports: list[ReportResponse] = []
        db = self.session_factory()
        try:
            service = ReportQueryService(db)
            while True:
                page, _ = service.list_reports(
                    tenant_id,
                    skip=len(reports),
                    limit=PAGE_SIZE,
                    practitioner_id=practitioner_id,
                    status=status,
                    signed_from=signed_from,
                    signed_to=signed_to,
                    order_by="signed_at:asc",
                )
                reports.extend(page)
                if len(page) < PAGE_SIZE:
                    break
        finally:
            db.close()

        logger.debug("Loaded %d reports for tenant %s", len(reports), tenant_id)
        return reports
