"""Read side of reports: listing with their currently configured values."""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.core.money import to_money
from reportpay.models.report import Report, ReportStatus
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.repositories.report_repository import ReportRepository
from reportpay.schemas.report import ReportResponse


class ReportQueryService:
    def __init__(self, db: Session):
        self.db = db
        self.report_repo = ReportRepository(db)
        self.price_repo = ReportPriceRepository(db)

    def list_reports(
        self,
        tenant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        practitioner_id: UUID | None = None,
        status: ReportStatus | None = None,
        signed_from: datetime | None = None,
        signed_to: datetime | None = None,
        order_by: str | None = None,
    ) -> tuple[list[ReportResponse], int]:
        """Return one page of reports and the total matching the filters."""
        reports = self.report_repo.get_all(
            tenant_id,
            skip=skip,
            limit=limit,
            practitioner_id=practitioner_id,
            status=status,
            signed_from=signed_from,
            signed_to=signed_to,
            order_by=order_by,
        )
        total = self.report_repo.count(
            tenant_id,
            practitioner_id=practitioner_id,
            status=status,
            signed_from=signed_from,
            signed_to=signed_to,
        )
        return self.to_responses(tenant_id, reports), total

    def to_responses(self, tenant_id: UUID, reports: Sequence[Report]) -> list[ReportResponse]:
        """Attach the configured value of each report's exam type.

        Reports without a configured price are valued at zero.
        """
        keys = {(report.practitioner_id, report.exam_type) for report in reports}
        values = self.price_repo.values_for(tenant_id, keys)  # type: ignore[arg-type]
        return [
            ReportResponse.model_validate(report).model_copy(
                update={
                    "configured_value": to_money(
                        values.get((report.practitioner_id, report.exam_type))  # type: ignore[arg-type]
                    )
                }
            )
            for report in reports
        ]
