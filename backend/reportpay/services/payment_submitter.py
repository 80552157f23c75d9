"""Commits a validated batch and reconciles the selector with the outcome."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from reportpay.models.report_payment import PaymentMethod
from reportpay.schemas.report_payment import ReportPaymentCreate
from reportpay.services.batch_selector import (
    BatchSelector,
    PaymentBatch,
    SubmitFail,
    SubmitStart,
    SubmitSucceed,
)
from reportpay.services.payment_authority import PaymentAuthority
from reportpay.services.reconciliation import ReconciliationEngine, ValidatedBatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    payment_id: UUID
    net_value: Decimal
    paid_at: datetime
    batch: ValidatedBatch


class PaymentSubmitter:
    """Sends one batch at a time to the payment authority.

    The selector is held busy for the whole round trip, so the batch that
    reaches the authority is exactly the snapshot taken when ``submit`` was
    called. Success clears the selector; every failure releases it with the
    selection intact.
    """

    def __init__(
        self,
        authority: PaymentAuthority,
        selector: BatchSelector,
        tenant_id: UUID,
        engine: ReconciliationEngine | None = None,
    ):
        self.authority = authority
        self.selector = selector
        self.tenant_id = tenant_id
        self.engine = engine or ReconciliationEngine()

    async def submit(
        self,
        batch: PaymentBatch,
        method: PaymentMethod,
        observations: str | None = None,
        idempotency_key: str | None = None,
    ) -> SubmissionResult:
        """Submit ``batch``.

        Raises:
            EmptyBatchError, InvalidDiscountError: before any network call.
            PartialConflictError: some reports were paid concurrently.
            ValueDriftError: configured prices changed since selection.
            TransientError: transport failure or timeout; safe to retry.
            AuthorizationError: credentials refused.
        """
        validated = self.engine.validate(batch)
        if batch.selected_report_ids != self.selector.selected_report_ids:
            raise ValueError("Batch does not match the current selection")

        request = ReportPaymentCreate(
            practitioner_id=validated.practitioner_id,
            report_ids=validated.report_ids,
            gross_value=validated.gross_value,
            discount=validated.discount,
            discount_percentage=validated.discount_percentage,
            method=method,
            observations=observations,
        )
        key = idempotency_key or str(uuid.uuid4())

        self.selector.dispatch(SubmitStart())
        try:
            receipt = await self.authority.submit_payment(
                self.tenant_id, request, idempotency_key=key
            )
        except BaseException as e:
            self.selector.dispatch(SubmitFail())
            logger.info("Payment submission failed: %s", e.__class__.__name__)
            raise
        self.selector.dispatch(SubmitSucceed())

        logger.info(
            "Payment %s committed for %d reports", receipt.payment_id, len(validated.reports)
        )
        return SubmissionResult(
            payment_id=receipt.payment_id,
            net_value=receipt.net_value,
            paid_at=receipt.paid_at,
            batch=validated,
        )
