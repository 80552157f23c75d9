"""Practitioner lookup endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from reportpay.core.auth import get_current_tenant
from reportpay.core.database import get_db
from reportpay.models.practitioner import Practitioner
from reportpay.repositories.practitioner_repository import PractitionerRepository
from reportpay.schemas.practitioner import PractitionerResponse

router = APIRouter()


@router.get("/", response_model=list[PractitionerResponse], summary="List practitioners")
async def list_practitioners(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> list[Practitioner]:
    return PractitionerRepository(db).get_all(tenant_id, skip=skip, limit=limit)
