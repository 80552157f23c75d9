"""Clients for the authority that commits report payments.

``HttpPaymentAuthority`` talks to the REST API; ``LocalPaymentAuthority``
commits through ``ReportPaymentService`` in the same process. Both turn every
outcome into either a ``ReportPaymentCommitResponse`` or a typed
``ReportPaymentError``.
"""

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from reportpay.core.config import settings
from reportpay.schemas.report_payment import ReportPaymentCommitResponse, ReportPaymentCreate
from reportpay.services.payment_errors import (
    AuthorizationError,
    CrossPractitionerError,
    InvalidDiscountError,
    PartialConflictError,
    PaymentRejectedError,
    ReportNotFoundError,
    TransientError,
    ValueDriftError,
)
from reportpay.services.report_payment_service import ReportPaymentService

logger = logging.getLogger(__name__)

PAYMENTS_PATH = "/v1/report_payments"
TRANSIENT_STATUS_CODES = {502, 503, 504}


class PaymentAuthority(Protocol):
    async def submit_payment(
        self,
        tenant_id: UUID,
        request: ReportPaymentCreate,
        idempotency_key: str | None = None,
    ) -> ReportPaymentCommitResponse: ...


def _detail(response: httpx.Response) -> Any:
    try:
        return response.json().get("detail")
    except ValueError:
        return response.text


def _uuid_or_none(value: Any) -> UUID | None:
    return UUID(str(value)) if value else None


class HttpPaymentAuthority:
    """Submits payments to ``POST /v1/report_payments``."""

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

    async def submit_payment(
        self,
        tenant_id: UUID,
        request: ReportPaymentCreate,
        idempotency_key: str | None = None,
    ) -> ReportPaymentCommitResponse:
        headers = {**self.headers, "X-Tenant-Id": str(tenant_id)}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{PAYMENTS_PATH}/",
                    json=request.model_dump(mode="json"),
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            logger.warning("Payment submission timed out: %s", e)
            raise TransientError(f"Payment authority timed out: {e}") from e
        except httpx.TransportError as e:
            logger.warning("Payment submission failed in transport: %s", e)
            raise TransientError(f"Payment authority unreachable: {e}") from e

        return self._interpret(response)

    @staticmethod
    def _interpret(response: httpx.Response) -> ReportPaymentCommitResponse:
        status = response.status_code
        if status in (200, 201):
            return ReportPaymentCommitResponse.model_validate(response.json())

        detail = _detail(response)
        code = detail.get("code") if isinstance(detail, dict) else None

        if status == 409 and code == "already_paid":
            raise PartialConflictError(UUID(str(i)) for i in detail.get("already_paid_ids", []))
        if status == 409 and code == "value_drift":
            raise ValueDriftError(
                Decimal(str(detail.get("submitted_gross_value", "0"))),
                Decimal(str(detail.get("expected_gross_value", "0"))),
            )
        if status in (401, 403):
            raise AuthorizationError(status)
        if status == 404 and code == "report_not_found":
            raise ReportNotFoundError(UUID(str(i)) for i in detail.get("report_ids", []))
        if status == 422 and code == "invalid_discount":
            percentage = detail.get("discount_percentage")
            raise InvalidDiscountError(
                Decimal(str(detail.get("discount", "0"))),
                Decimal(str(detail.get("gross_value", "0"))),
                Decimal(str(percentage)) if percentage is not None else None,
            )
        if status == 422 and code == "cross_practitioner":
            raise CrossPractitionerError(
                _uuid_or_none(detail.get("expected_practitioner_id")),
                _uuid_or_none(detail.get("actual_practitioner_id")),
            )
        if status in TRANSIENT_STATUS_CODES:
            raise TransientError(f"Payment authority unavailable ({status})")

        logger.error("Payment authority rejected submission: %s %s", status, detail)
        raise PaymentRejectedError(status, detail)


class LocalPaymentAuthority:
    """Commits payments in-process through ``ReportPaymentService``.

    Idempotency keys are accepted for interface compatibility only: a local
    commit cannot lose its response.
    """

    def __init__(self, session_factory: Callable[[], Session], registered_by: str | None = None):
        self.session_factory = session_factory
        self.registered_by = registered_by

    async def submit_payment(
        self,
        tenant_id: UUID,
        request: ReportPaymentCreate,
        idempotency_key: str | None = None,
    ) -> ReportPaymentCommitResponse:
        db = self.session_factory()
        try:
            service = ReportPaymentService(db)
            return service.register_payment(tenant_id, request, registered_by=self.registered_by)
        finally:
            db.close()
