"""Report model for signed medical reports owed to a practitioner."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, func

from reportpay.core.database import Base
from reportpay.models.shared import DEFAULT_TENANT_ID, MoneyType, UUIDType, generate_uuid


class ReportStatus(str, Enum):
    """Payment status of a report. PAID is terminal."""

    PENDING = "pending"
    PAID = "paid"


class Report(Base):
    """Report model - a signed document pending or already compensated.

    ``paid_value``, ``payment_id`` and ``paid_at`` are written once, by the
    payment commit, and never touched again.
    """

    __tablename__ = "reports"

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
    exam_type = Column(String(100), nullable=False)
    patient_name = Column(String(255), nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)
    paid_value = Column(MoneyType, nullable=True)
    payment_id = Column(
        UUIDType,
        ForeignKey("report_payments.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
