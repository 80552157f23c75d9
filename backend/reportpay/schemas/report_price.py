"""Report price schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReportPriceUpsert(BaseModel):
    practitioner_id: UUID
    exam_type: str = Field(min_length=1, max_length=100)
    value: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    notes: str | None = None


class ReportPriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    practitioner_id: UUID
    exam_type: str
    value: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
