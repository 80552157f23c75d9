"""Server-side commit of report payment batches."""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.core.config import settings
from reportpay.core.money import ZERO, format_money, sum_money, to_money
from reportpay.models.report import ReportStatus
from reportpay.models.shared import utc_now
from reportpay.repositories.practitioner_repository import PractitionerRepository
from reportpay.repositories.report_payment_repository import ReportPaymentRepository
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.repositories.report_repository import ReportRepository
from reportpay.repositories.tenant_repository import TenantRepository
from reportpay.schemas.report_payment import (
    PaymentStatsResponse,
    ReceiptLine,
    ReceiptResponse,
    ReportPaymentCommitResponse,
    ReportPaymentCreate,
    ReportPaymentResponse,
    ReportPaymentUpdate,
)
from reportpay.services.audit_service import AuditService
from reportpay.services.payment_errors import (
    CrossPractitionerError,
    PartialConflictError,
    ReportNotFoundError,
    ValueDriftError,
)
from reportpay.services.reconciliation import check_discount, check_discount_percentage

logger = logging.getLogger(__name__)


class ReportPaymentService:
    """Registers, reads and summarizes report payments for a tenant."""

    def __init__(self, db: Session):
        self.db = db
        self.report_repo = ReportRepository(db)
        self.price_repo = ReportPriceRepository(db)
        self.payment_repo = ReportPaymentRepository(db)
        self.practitioner_repo = PractitionerRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.audit_service = AuditService(db)

    def register_payment(
        self,
        tenant_id: UUID,
        data: ReportPaymentCreate,
        registered_by: str | None = None,
    ) -> ReportPaymentCommitResponse:
        """Pay every requested report under one payment, or none of them.

        The requested reports are locked, re-checked as still pending and
        re-priced inside one transaction. Any failure rolls the transaction
        back and raises; nothing is partially applied.

        Raises:
            ReportNotFoundError: some ids are unknown to the tenant.
            CrossPractitionerError: a report belongs to another practitioner.
            PartialConflictError: some reports were already paid.
            ValueDriftError: the submitted gross no longer matches the prices.
            InvalidDiscountError: the discount is outside ``[0, gross]`` or is not the
                stated percentage of the gross value.
        """
        report_ids = list(data.report_ids)
        try:
            reports = self.report_repo.get_by_ids_for_update(tenant_id, report_ids)

            missing = set(report_ids) - {report.id for report in reports}
            if missing:
                raise ReportNotFoundError(missing)  # type: ignore[arg-type]

            for report in reports:
                if report.practitioner_id != data.practitioner_id:
                    raise CrossPractitionerError(
                        data.practitioner_id, report.practitioner_id  # type: ignore[arg-type]
                    )

            already_paid = [
                report.id for report in reports if report.status != ReportStatus.PENDING.value
            ]
            if already_paid:
                raise PartialConflictError(already_paid)  # type: ignore[arg-type]

            prices = self.price_repo.values_for(
                tenant_id,
                {(report.practitioner_id, report.exam_type) for report in reports},  # type: ignore[misc]
            )
            paid_values = {
                report.id: to_money(prices.get((report.practitioner_id, report.exam_type)))  # type: ignore[arg-type]
                for report in reports
            }
            gross_value = sum_money(paid_values.values())
            submitted_gross = to_money(data.gross_value)
            if gross_value != submitted_gross:
                raise ValueDriftError(submitted_gross, gross_value)

            discount = check_discount(data.discount, gross_value)
            if data.discount_percentage is not None:
                check_discount_percentage(data.discount_percentage, discount, gross_value)
            net_value = gross_value - discount
            paid_at = utc_now()

            tenant = self.tenant_repo.get_by_id(tenant_id)
            payment = self.payment_repo.add(
                tenant_id=tenant_id,
                practitioner_id=data.practitioner_id,
                gross_value=gross_value,
                discount=discount,
                discount_percentage=data.discount_percentage,
                net_value=net_value,
                currency=tenant.default_currency if tenant else settings.DEFAULT_CURRENCY,
                method=data.method.value,
                observations=data.observations,
                registered_by=registered_by,
                paid_at=paid_at,
            )
            payment_id = payment.id

            flipped = self.report_repo.mark_paid(payment_id, paid_values, paid_at)  # type: ignore[arg-type]
            if flipped != len(paid_values):
                # Another commit won the race between our read and our update
                self.db.rollback()
                now_paid = [
                    report.id
                    for report in self.report_repo.get_by_ids_for_update(tenant_id, report_ids)
                    if report.status != ReportStatus.PENDING.value
                ]
                raise PartialConflictError(now_paid or report_ids)  # type: ignore[arg-type]

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Registered payment %s for practitioner %s: %d reports, net %s",
            payment_id,
            data.practitioner_id,
            len(report_ids),
            format_money(net_value, settings.DEFAULT_CURRENCY),
        )
        self.audit_service.log_create(
            resource_type="report_payment",
            resource_id=payment_id,  # type: ignore[arg-type]
            tenant_id=tenant_id,
            actor_type="user" if registered_by else "system",
            actor_id=registered_by,
            data={
                "practitioner_id": str(data.practitioner_id),
                "report_count": len(report_ids),
                "gross_value": str(gross_value),
                "discount": str(discount),
                "net_value": str(net_value),
                "method": data.method.value,
            },
        )
        for report_id in sorted(report_ids, key=str):
            self.audit_service.log_status_change(
                resource_type="report",
                resource_id=report_id,
                tenant_id=tenant_id,
                old_status=ReportStatus.PENDING.value,
                new_status=ReportStatus.PAID.value,
                actor_type="user" if registered_by else "system",
                actor_id=registered_by,
            )

        return ReportPaymentCommitResponse(
            payment_id=payment_id,  # type: ignore[arg-type]
            net_value=net_value,
            paid_at=paid_at,
            report_ids=sorted(report_ids, key=str),
        )

    def get_payment(self, tenant_id: UUID, payment_id: UUID) -> ReportPaymentResponse | None:
        payment = self.payment_repo.get_by_id(payment_id, tenant_id)
        if payment is None:
            return None
        return ReportPaymentResponse.model_validate(payment)

    def update_payment(
        self,
        tenant_id: UUID,
        payment_id: UUID,
        data: ReportPaymentUpdate,
        updated_by: str | None = None,
    ) -> ReportPaymentResponse | None:
        """Change the method or observations of a committed payment.

        Amounts and the set of paid reports are fixed once committed.
        """
        payment = self.payment_repo.get_by_id(payment_id, tenant_id)
        if payment is None:
            return None
        old_data = {"method": payment.method, "observations": payment.observations}

        payment = self.payment_repo.update(payment_id, data, tenant_id)
        if payment is None:
            return None
        new_data = {"method": payment.method, "observations": payment.observations}

        logger.info("Updated payment %s", payment_id)
        self.audit_service.log_update(
            resource_type="report_payment",
            resource_id=payment_id,
            tenant_id=tenant_id,
            actor_type="user" if updated_by else "system",
            actor_id=updated_by,
            old_data=old_data,
            new_data=new_data,
        )
        return ReportPaymentResponse.model_validate(payment)

    def get_receipt(self, tenant_id: UUID, payment_id: UUID) -> ReceiptResponse | None:
        """Collect what a receipt document is rendered from."""
        payment = self.payment_repo.get_by_id(payment_id, tenant_id)
        if payment is None:
            return None

        tenant = self.tenant_repo.get_by_id(tenant_id)
        practitioner = self.practitioner_repo.get_by_id(payment.practitioner_id)  # type: ignore[arg-type]
        lines = [
            ReceiptLine(
                report_id=report.id,  # type: ignore[arg-type]
                exam_type=report.exam_type,  # type: ignore[arg-type]
                patient_name=report.patient_name,  # type: ignore[arg-type]
                signed_at=report.signed_at,  # type: ignore[arg-type]
                paid_value=to_money(report.paid_value),  # type: ignore[arg-type]
            )
            for report in payment.reports
        ]
        return ReceiptResponse(
            payment=ReportPaymentResponse.model_validate(payment),
            tenant_name=tenant.legal_name or tenant.name if tenant else None,  # type: ignore[arg-type]
            tenant_tax_id=tenant.tax_id if tenant else None,  # type: ignore[arg-type]
            practitioner_name=practitioner.name if practitioner else "N/A",  # type: ignore[arg-type]
            practitioner_license_number=(
                practitioner.license_number if practitioner else None  # type: ignore[arg-type]
            ),
            lines=lines,
            document_url=f"{settings.RECEIPT_BASE_URL.rstrip('/')}/{payment_id}/receipt.pdf",
        )

    def get_stats(self, tenant_id: UUID, days: int = 30) -> PaymentStatsResponse:
        """Totals for payments made in the last ``days`` days."""
        since = utc_now() - timedelta(days=days)
        stats = self.payment_repo.get_stats(tenant_id, since)
        count = stats["payment_count"]
        average = to_money(stats["total_net_value"] / count) if count else ZERO
        return PaymentStatsResponse(
            period_days=days,
            payment_count=count,
            report_count=stats["report_count"],
            total_gross_value=to_money(stats["total_gross_value"]),
            total_discount=to_money(stats["total_discount"]),
            total_net_value=to_money(stats["total_net_value"]),
            average_ticket=average,
        )
