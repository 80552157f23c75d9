"""ReportPayment model - one settled batch of reports for a practitioner."""

from enum import Enum
from uuid import UUID

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from reportpay.core.database import Base
from reportpay.models.shared import DEFAULT_TENANT_ID, MoneyType, UUIDType, generate_uuid, utc_now


class PaymentMethod(str, Enum):
    """How the practitioner was paid."""

    PIX = "pix"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    OTHER = "other"


class ReportPayment(Base):
    """ReportPayment model - persisted result of a successful reconciliation."""

    __tablename__ = "report_payments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    tenant_id = Column(
        UUIDType,
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_TENANT_ID,
    )
    practitioner_id = Column(
        UUIDType, ForeignKey("practitioners.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Amounts
    gross_value = Column(MoneyType, nullable=False)
    discount = Column(MoneyType, nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=True)
    net_value = Column(MoneyType, nullable=False)
    currency = Column(String(3), nullable=False, default="BRL")

    method = Column(String(20), nullable=False, default=PaymentMethod.PIX.value)
    observations = Column(Text, nullable=True)
    registered_by = Column(String(255), nullable=True)

    paid_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reports = relationship("Report", lazy="selectin", order_by="Report.signed_at")

    @property
    def report_ids(self) -> list[UUID]:
        return [report.id for report in self.reports]
