"""ReportPrice model - the configured value paid for an exam type."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func

from reportpay.core.database import Base
from reportpay.models.shared import DEFAULT_TENANT_ID, MoneyType, UUIDType, generate_uuid


class ReportPrice(Base):
    __tablename__ = "report_prices"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "practitioner_id", "exam_type", name="uq_report_price_scope"
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    tenant_id = Column(
        UUIDType,
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_TENANT_ID,
    )
    practitioner_id = Column(
        UUIDType, ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exam_type = Column(String(100), nullable=False)
    value = Column(MoneyType, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
