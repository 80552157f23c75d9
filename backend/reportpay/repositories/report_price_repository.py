"""ReportPrice repository for data access."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.models.report_price import ReportPrice
from reportpay.schemas.report_price import ReportPriceUpsert


class ReportPriceRepository:
    """Repository for ReportPrice model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        tenant_id: UUID,
        practitioner_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ReportPrice]:
        query = self.db.query(ReportPrice).filter(ReportPrice.tenant_id == tenant_id)
        if practitioner_id:
            query = query.filter(ReportPrice.practitioner_id == practitioner_id)
        return (
            query.order_by(ReportPrice.exam_type.asc()).offset(skip).limit(limit).all()
        )

    def get(self, tenant_id: UUID, practitioner_id: UUID, exam_type: str) -> ReportPrice | None:
        return (
            self.db.query(ReportPrice)
            .filter(
                ReportPrice.tenant_id == tenant_id,
                ReportPrice.practitioner_id == practitioner_id,
                ReportPrice.exam_type == exam_type,
            )
            .first()
        )

    def upsert(self, data: ReportPriceUpsert, tenant_id: UUID) -> ReportPrice:
        """Create the price for (practitioner, exam type) or replace its value."""
        price = self.get(tenant_id, data.practitioner_id, data.exam_type)
        if price is None:
            price = ReportPrice(tenant_id=tenant_id, **data.model_dump())
            self.db.add(price)
        else:
            price.value = data.value  # type: ignore[assignment]
            price.notes = data.notes  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(price)
        return price

    def get_by_id(self, price_id: UUID, tenant_id: UUID | None = None) -> ReportPrice | None:
        query = self.db.query(ReportPrice).filter(ReportPrice.id == price_id)
        if tenant_id is not None:
            query = query.filter(ReportPrice.tenant_id == tenant_id)
        return query.first()

    def delete(self, price_id: UUID, tenant_id: UUID) -> bool:
        price = self.get_by_id(price_id, tenant_id)
        if not price:
            return False
        self.db.delete(price)
        self.db.commit()
        return True

    def values_for(
        self,
        tenant_id: UUID,
        keys: set[tuple[UUID, str]],
    ) -> dict[tuple[UUID, str], Decimal]:
        """Map (practitioner_id, exam_type) pairs to their configured value.

        Pairs without a configured price are absent from the result.
        """
        if not keys:
            return {}
        practitioner_ids = {practitioner_id for practitioner_id, _ in keys}
        rows = (
            self.db.query(ReportPrice)
            .filter(
                ReportPrice.tenant_id == tenant_id,
                ReportPrice.practitioner_id.in_(practitioner_ids),
            )
            .all()
        )
        values: dict[tuple[UUID, str], Decimal] = {}
        for row in rows:
            key = (row.practitioner_id, row.exam_type)
            if key in keys:
                values[key] = Decimal(str(row.value))
        return values
