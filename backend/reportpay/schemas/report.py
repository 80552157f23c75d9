"""Report schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from reportpay.models.report import ReportStatus


class ReportCreate(BaseModel):
    practitioner_id: UUID
    exam_type: str = Field(min_length=1, max_length=100)
    patient_name: str | None = Field(default=None, max_length=255)
    signed_at: datetime | None = None


class ReportResponse(BaseModel):
    """A report as seen by the payment screens.

    ``configured_value`` is the price configured right now for the report's
    exam type; ``paid_value`` is the price frozen when it was paid.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    practitioner_id: UUID
    exam_type: str
    patient_name: str | None = None
    signed_at: datetime
    status: ReportStatus
    configured_value: Decimal = Decimal("0.00")
    paid_value: Decimal | None = None
    payment_id: UUID | None = None
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == ReportStatus.PAID
