"""Report API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from reportpay.core.auth import get_current_tenant
from reportpay.core.database import get_db
from reportpay.models.report import ReportStatus
from reportpay.repositories.report_repository import ReportRepository
from reportpay.schemas.report import ReportResponse
from reportpay.services.report_query_service import ReportQueryService

router = APIRouter()


@router.get(
    "/",
    response_model=list[ReportResponse],
    summary="List reports",
    responses={400: {"description": "Invalid X-Tenant-Id header"}},
)
async def list_reports(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    practitioner_id: UUID | None = None,
    status: ReportStatus | None = None,
    signed_from: datetime | None = None,
    signed_to: datetime | None = None,
    order_by: str | None = Query(default=None, description="field:direction, e.g. signed_at:asc"),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> list[ReportResponse]:
    """List reports with their configured value, filtered by practitioner, status and signature date."""
    service = ReportQueryService(db)
    reports, total = service.list_reports(
        tenant_id,
        skip=skip,
        limit=limit,
        practitioner_id=practitioner_id,
        status=status,
        signed_from=signed_from,
        signed_to=signed_to,
        order_by=order_by,
    )
    response.headers["X-Total-Count"] = str(total)
    return reports


@router.get(
    "/{report_id}",
    response_model=ReportResponse,
    summary="Get report",
    responses={404: {"description": "Report not found"}},
)
async def get_report(
    report_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> ReportResponse:
    report = ReportRepository(db).get_by_id(report_id, tenant_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return ReportQueryService(db).to_responses(tenant_id, [report])[0]
