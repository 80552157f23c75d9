"""One operator's payment session.

Wires a report source, the batch selector, the reconciliation engine and the
submitter together. After a conflict or a price drift the local statuses are
known to be stale, and every mutating call is refused until ``refresh`` has
re-read them from the source.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from reportpay.core.money import ZERO
from reportpay.models.report import ReportStatus
from reportpay.models.report_payment import PaymentMethod
from reportpay.schemas.report import ReportResponse
from reportpay.services.batch_selector import BatchSelector
from reportpay.services.payment_authority import PaymentAuthority
from reportpay.services.payment_errors import (
    BatchBusyError,
    PartialConflictError,
    RefreshRequiredError,
    TransientError,
    UnknownReportError,
    ValueDriftError,
)
from reportpay.services.payment_submitter import PaymentSubmitter, SubmissionResult
from reportpay.services.reconciliation import ReconciliationEngine
from reportpay.services.report_source import ReportSource

logger = logging.getLogger(__name__)


class PaymentDesk:
    def __init__(
        self,
        tenant_id: UUID,
        source: ReportSource,
        authority: PaymentAuthority,
        engine: ReconciliationEngine | None = None,
    ):
        self.tenant_id = tenant_id
        self.source = source
        self.engine = engine or ReconciliationEngine()
        self.selector = BatchSelector()
        self.submitter = PaymentSubmitter(authority, self.selector, tenant_id, self.engine)
        self.refresh_required = False
        self._pending: dict[UUID, ReportResponse] = {}
        self._paid: dict[UUID, ReportResponse] = {}
        self._retry: tuple[tuple[object, ...], str] | None = None

    @property
    def pending_reports(self) -> list[ReportResponse]:
        return list(self._pending.values())

    @property
    def paid_reports(self) -> dict[UUID, ReportResponse]:
        """Reports this desk paid, as marked locally after each commit."""
        return dict(self._paid)

    @property
    def gross_value(self) -> Decimal:
        return self.selector.gross_value

    async def refresh(
        self,
        practitioner_id: UUID | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> list[ReportResponse]:
        """Reload the pending view and bring selected snapshots up to date."""
        if self.selector.busy:
            raise BatchBusyError()

        pending = await self.source.list_reports(
            self.tenant_id,
            practitioner_id=practitioner_id,
            status=ReportStatus.PENDING,
            signed_from=signed_from,
            signed_to=signed_to,
        )
        fresh = {report.id: report for report in pending}

        selected = self.selector.selected_report_ids
        updates = [fresh[report_id] for report_id in selected if report_id in fresh]
        missing = selected - fresh.keys()
        if missing:
            # Selected reports that left the pending view are usually paid now
            batch_reports = await self.source.list_reports(
                self.tenant_id, practitioner_id=self.selector.practitioner_id
            )
            updates.extend(report for report in batch_reports if report.id in missing)

        self.selector.sync(updates)
        self._pending = fresh
        self.refresh_required = False
        logger.debug("Loaded %d pending reports for tenant %s", len(fresh), self.tenant_id)
        return self.pending_reports

    def _ensure_fresh(self) -> None:
        if self.refresh_required:
            raise RefreshRequiredError()

    def _lookup(self, report_id: UUID) -> ReportResponse:
        report = self._pending.get(report_id) or self.selector.state.reports.get(report_id)
        if report is None:
            report = self._paid.get(report_id)
        if report is None:
            raise UnknownReportError(report_id)
        return report

    def toggle(self, report_id: UUID) -> None:
        self._ensure_fresh()
        self.selector.toggle(self._lookup(report_id))

    def deselect(self, report_id: UUID) -> None:
        self._ensure_fresh()
        self.selector.deselect(report_id)

    def drop_paid(self) -> list[UUID]:
        """Deselect every selected report that is now known to be paid."""
        self._ensure_fresh()
        dropped = [report.id for report in self.selector.selected_reports if report.is_paid]
        for report_id in dropped:
            self.selector.deselect(report_id)
        return dropped

    def clear(self) -> None:
        """Abandon the current batch. Allowed even when a refresh is due."""
        self._retry = None
        self.selector.clear()

    def discount_for_percentage(self, percentage: Decimal) -> Decimal:
        return self.engine.discount_for_percentage(self.selector.gross_value, percentage)

    async def submit(
        self,
        method: PaymentMethod,
        observations: str | None = None,
        discount: Decimal = ZERO,
        discount_percentage: Decimal | None = None,
    ) -> SubmissionResult:
        """Validate and submit the current selection.

        On success the paid reports leave the pending view and are recorded
        locally as paid at their configured value. A ``TransientError`` keeps
        the idempotency key so submitting the same batch again replays the
        original outcome.
        """
        self._ensure_fresh()
        if discount_percentage is not None:
            discount = self.discount_for_percentage(discount_percentage)

        batch = self.selector.snapshot(discount, discount_percentage)
        fingerprint = (
            batch.selected_report_ids,
            batch.discount,
            batch.discount_percentage,
            method,
            observations,
        )
        if self._retry is not None and self._retry[0] == fingerprint:
            key = self._retry[1]
        else:
            key = str(uuid.uuid4())

        try:
            result = await self.submitter.submit(batch, method, observations, idempotency_key=key)
        except TransientError:
            self._retry = (fingerprint, key)
            raise
        except (PartialConflictError, ValueDriftError):
            self._retry = None
            self.refresh_required = True
            raise

        self._retry = None
        self._mark_paid(result)
        return result

    def _mark_paid(self, result: SubmissionResult) -> None:
        for report in result.batch.reports:
            self._paid[report.id] = report.model_copy(
                update={
                    "status": ReportStatus.PAID,
                    "paid_value": report.configured_value,
                    "payment_id": result.payment_id,
                    "paid_at": result.paid_at,
                }
            )
            self._pending.pop(report.id, None)
