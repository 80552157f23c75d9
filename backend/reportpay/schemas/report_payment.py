"""Report payment schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportpay.models.report_payment import PaymentMethod


class ReportPaymentCreate(BaseModel):
    """Body of a batch payment submission."""

    practitioner_id: UUID
    report_ids: list[UUID] = Field(min_length=1)
    gross_value: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    discount_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    method: PaymentMethod = PaymentMethod.PIX
    observations: str | None = Field(default=None, max_length=2000)

    @field_validator("report_ids")
    @classmethod
    def reject_duplicate_ids(cls, value: list[UUID]) -> list[UUID]:
        if len(set(value)) != len(value):
            raise ValueError("report_ids must not contain duplicates")
        return value


class ReportPaymentUpdate(BaseModel):
    """Only bookkeeping fields can change once a payment is committed."""

    model_config = ConfigDict(extra="forbid")

    method: PaymentMethod | None = None
    observations: str | None = Field(default=None, max_length=2000)

    @field_validator("method")
    @classmethod
    def reject_null_method(cls, value: PaymentMethod | None) -> PaymentMethod:
        if value is None:
            raise ValueError("method cannot be null")
        return value


class ReportPaymentCommitResponse(BaseModel):
    """Returned by a successful submission."""

    payment_id: UUID
    net_value: Decimal
    paid_at: datetime
    report_ids: list[UUID] = Field(default_factory=list)


class PaymentConflictDetail(BaseModel):
    """409 body: the batch was rejected as a whole and nothing was committed."""

    code: str
    message: str
    already_paid_ids: list[UUID] = Field(default_factory=list)
    submitted_gross_value: Decimal | None = None
    expected_gross_value: Decimal | None = None


class ReportPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    practitioner_id: UUID
    report_ids: list[UUID]
    gross_value: Decimal
    discount: Decimal
    discount_percentage: Decimal | None = None
    net_value: Decimal
    currency: str
    method: str
    observations: str | None = None
    registered_by: str | None = None
    paid_at: datetime
    created_at: datetime | None = None


class PaymentStatsResponse(BaseModel):
    period_days: int
    payment_count: int
    report_count: int
    total_gross_value: Decimal
    total_discount: Decimal
    total_net_value: Decimal
    average_ticket: Decimal


class ReceiptLine(BaseModel):
    report_id: UUID
    exam_type: str
    patient_name: str | None = None
    signed_at: datetime
    paid_value: Decimal


class ReceiptResponse(BaseModel):
    """Data a receipt document is rendered from."""

    payment: ReportPaymentResponse
    tenant_name: str | None = None
    tenant_tax_id: str | None = None
    practitioner_name: str
    practitioner_license_number: str | None = None
    lines: list[ReceiptLine]
    document_url: str
