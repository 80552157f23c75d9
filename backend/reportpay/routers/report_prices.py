"""Configured report price endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from reportpay.core.auth import get_current_tenant
from reportpay.core.database import get_db
from reportpay.models.report_price import ReportPrice
from reportpay.repositories.practitioner_repository import PractitionerRepository
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.schemas.report_price import ReportPriceResponse, ReportPriceUpsert

router = APIRouter()


@router.get("/", response_model=list[ReportPriceResponse], summary="List configured prices")
async def list_report_prices(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    practitioner_id: UUID | None = None,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> list[ReportPrice]:
    repo = ReportPriceRepository(db)
    return repo.get_all(tenant_id, practitioner_id=practitioner_id, skip=skip, limit=limit)


@router.put(
    "/",
    response_model=ReportPriceResponse,
    summary="Create or replace a configured price",
    responses={404: {"description": "Practitioner not found"}},
)
async def upsert_report_price(
    data: ReportPriceUpsert,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> ReportPrice:
    """Set the value paid for one exam type of one practitioner.

    Changing a price affects pending reports only; paid reports keep the
    value frozen at payment time.
    """
    if not PractitionerRepository(db).get_by_id(data.practitioner_id, tenant_id):
        raise HTTPException(status_code=404, detail="Practitioner not found")
    return ReportPriceRepository(db).upsert(data, tenant_id)


@router.delete(
    "/{price_id}",
    status_code=204,
    summary="Delete a configured price",
    responses={404: {"description": "Price not found"}},
)
async def delete_report_price(
    price_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> None:
    """Pending reports of that exam type are valued at zero afterwards."""
    if not ReportPriceRepository(db).delete(price_id, tenant_id):
        raise HTTPException(status_code=404, detail="Price not found")
