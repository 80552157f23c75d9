"""Practitioner schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PractitionerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    license_number: str | None = Field(default=None, max_length=50)


class PractitionerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None = None
    license_number: str | None = None
    active: bool
