"""Report repository for data access."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from reportpay.core.sorting import apply_order_by
from reportpay.models.report import Report, ReportStatus
from reportpay.schemas.report import ReportCreate

SORTABLE_FIELDS = frozenset(
    {"signed_at", "created_at", "paid_at", "exam_type", "patient_name", "status"}
)


class ReportRepository:
    """Repository for Report model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Report).filter(Report.tenant_id == tenant_id)
        if practitioner_id:
            query = query.filter(Report.practitioner_id == practitioner_id)
        if status:
            query = query.filter(Report.status == status.value)
        if signed_from:
            query = query.filter(Report.signed_at >= signed_from)
        if signed_to:
            query = query.filter(Report.signed_at <= signed_to)
        return query

    def get_all(
        self,
        tenant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
        order_by: str | None = None,
    ) -> list[Report]:
        """Get reports with optional filters, newest signature first by default."""
        query = self._filtered(tenant_id, practitioner_id, status, signed_from, signed_to)
        query = apply_order_by(
            query, Report, order_by, SORTABLE_FIELDS, default=("signed_at", "desc")
        )
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
    ) -> int:
        return self._filtered(tenant_id, practitioner_id, status, signed_from, signed_to).count()

    def get_by_id(self, report_id: UUID, tenant_id: UUID | None = None) -> Report | None:
        query = self.db.query(Report).filter(Report.id == report_id)
        if tenant_id is not None:
            query = query.filter(Report.tenant_id == tenant_id)
        return query.first()

    def get_by_ids_for_update(self, tenant_id: UUID, report_ids: list[UUID]) -> list[Report]:
        """Load and row-lock reports inside the caller's transaction.

        ``FOR UPDATE`` is ignored by SQLite, where the conditional update in
        ``mark_paid`` is what guards against a concurrent commit.
        """
        return (
            self.db.query(Report)
            .filter(Report.tenant_id == tenant_id, Report.id.in_(report_ids))
            .with_for_update()
            .all()
        )

    def create(self, data: ReportCreate, tenant_id: UUID) -> Report:
        values = data.model_dump(exclude_none=True)
        report = Report(tenant_id=tenant_id, status=ReportStatus.PENDING.value, **values)
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        return report

    def mark_paid(
        self,
        payment_id: UUID,
        paid_values: dict[UUID, Decimal],
        paid_at: datetime,
    ) -> int:
        """Flip still-pending reports to paid. Does not commit.

        Returns the number of rows actually flipped; a report that is no
        longer pending is left untouched and not counted.
        """
        flipped = 0
        for report_id, paid_value in paid_values.items():
            result = self.db.execute(
                update(Report)
                .where(Report.id == report_id, Report.status == ReportStatus.PENDING.value)
                .values(
                    status=ReportStatus.PAID.value,
                    paid_value=paid_value,
                    payment_id=payment_id,
                    paid_at=paid_at,
                )
                .execution_options(synchronize_session="fetch")
            )
            flipped += result.rowcount
        return flipped
