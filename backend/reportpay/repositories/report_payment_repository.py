"""ReportPayment repository for data access."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from reportpay.models.report import Report
from reportpay.models.report_payment import PaymentMethod, ReportPayment
from reportpay.schemas.report_payment import ReportPaymentUpdate


class ReportPaymentRepository:
    """Repository for ReportPayment model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        tenant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        practitioner_id: UUID | None = None,
        method: PaymentMethod | None = None,
        paid_from: datetime | None = None,
        paid_to: datetime | None = None,
    ) -> list[ReportPayment]:
        """Get payments with optional filters, most recent first."""
        query = self.db.query(ReportPayment).filter(ReportPayment.tenant_id == tenant_id)
        if practitioner_id:
            query = query.filter(ReportPayment.practitioner_id == practitioner_id)
        if method:
            query = query.filter(ReportPayment.method == method.value)
        if paid_from:
            query = query.filter(ReportPayment.paid_at >= paid_from)
        if paid_to:
            query = query.filter(ReportPayment.paid_at <= paid_to)
        return query.order_by(ReportPayment.paid_at.desc()).offset(skip).limit(limit).all()

    def get_by_id(self, payment_id: UUID, tenant_id: UUID | None = None) -> ReportPayment | None:
        query = self.db.query(ReportPayment).filter(ReportPayment.id == payment_id)
        if tenant_id is not None:
            query = query.filter(ReportPayment.tenant_id == tenant_id)
        return query.first()

    def update(
        self, payment_id: UUID, data: ReportPaymentUpdate, tenant_id: UUID
    ) -> ReportPayment | None:
        payment = self.get_by_id(payment_id, tenant_id)
        if not payment:
            return None
        for key, value in data.model_dump(exclude_unset=True, mode="json").items():
            setattr(payment, key, value)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def add(self, **values: Any) -> ReportPayment:
        """Stage a new payment in the current transaction. Does not commit."""
        payment = ReportPayment(**values)
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_stats(self, tenant_id: UUID, since: datetime) -> dict[str, Any]:
        """Aggregate payments made since ``since``."""
        row = (
            self.db.query(
                func.count(ReportPayment.id),
                func.coalesce(func.sum(ReportPayment.gross_value), 0),
                func.coalesce(func.sum(ReportPayment.discount), 0),
                func.coalesce(func.sum(ReportPayment.net_value), 0),
            )
            .filter(ReportPayment.tenant_id == tenant_id, ReportPayment.paid_at >= since)
            .one()
        )
        report_count = (
            self.db.query(func.count(Report.id))
            .join(ReportPayment, Report.payment_id == ReportPayment.id)
            .filter(ReportPayment.tenant_id == tenant_id, ReportPayment.paid_at >= since)
            .scalar()
        )
        return {
            "payment_count": int(row[0]),
            "report_count": int(report_count or 0),
            "total_gross_value": Decimal(str(row[1])),
            "total_discount": Decimal(str(row[2])),
            "total_net_value": Decimal(str(row[3])),
        }
