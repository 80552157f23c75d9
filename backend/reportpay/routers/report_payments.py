"""Report payment API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from reportpay.core.auth import get_current_actor, get_current_tenant
from reportpay.core.database import get_db
from reportpay.core.idempotency import (
    IdempotencyResult,
    check_idempotency,
    record_idempotency_response,
)
from reportpay.models.report_payment import PaymentMethod, ReportPayment
from reportpay.repositories.report_payment_repository import ReportPaymentRepository
from reportpay.schemas.report_payment import (
    PaymentConflictDetail,
    PaymentStatsResponse,
    ReceiptResponse,
    ReportPaymentCommitResponse,
    ReportPaymentCreate,
    ReportPaymentResponse,
    ReportPaymentUpdate,
)
from reportpay.services.payment_errors import (
    CrossPractitionerError,
    InvalidDiscountError,
    PartialConflictError,
    ReportNotFoundError,
    ValueDriftError,
)
from reportpay.services.report_payment_service import ReportPaymentService

router = APIRouter()


@router.post(
    "/",
    response_model=ReportPaymentCommitResponse,
    status_code=201,
    summary="Pay a batch of reports",
    responses={
        404: {"description": "Some reports were not found"},
        409: {
            "description": "Reports already paid or prices changed; nothing was committed",
            "model": PaymentConflictDetail,
        },
        422: {"description": "Validation error"},
    },
)
async def create_report_payment(
    data: ReportPaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
    actor: str | None = Depends(get_current_actor),
) -> ReportPaymentCommitResponse | JSONResponse:
    """Mark every report in the batch as paid under one payment, atomically."""
    idempotency = check_idempotency(request, db, tenant_id, data.model_dump(mode="json"))
    if isinstance(idempotency, JSONResponse):
        return idempotency

    service = ReportPaymentService(db)
    try:
        result = service.register_payment(tenant_id, data, registered_by=actor)
    except PartialConflictError as e:
        raise HTTPException(
            status_code=409,
            detail=PaymentConflictDetail(
                code="already_paid",
                message=str(e),
                already_paid_ids=e.already_paid_ids,
            ).model_dump(mode="json"),
        ) from None
    except ValueDriftError as e:
        raise HTTPException(
            status_code=409,
            detail=PaymentConflictDetail(
                code="value_drift",
                message=str(e),
                submitted_gross_value=e.submitted,
                expected_gross_value=e.current,
            ).model_dump(mode="json"),
        ) from None
    except ReportNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={
                "code": "report_not_found",
                "message": str(e),
                "report_ids": [str(report_id) for report_id in e.report_ids],
            },
        ) from None
    except CrossPractitionerError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "code": "cross_practitioner",
                "message": str(e),
                "expected_practitioner_id": str(e.expected) if e.expected else None,
                "actual_practitioner_id": str(e.actual) if e.actual else None,
            },
        ) from None
    except InvalidDiscountError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "code": "invalid_discount",
                "message": str(e),
                "discount": str(e.discount),
                "gross_value": str(e.gross_value),
                "discount_percentage": (
                    str(e.percentage) if e.percentage is not None else None
                ),
            },
        ) from None

    if isinstance(idempotency, IdempotencyResult):
        body = result.model_dump(mode="json")
        record_idempotency_response(db, tenant_id, idempotency.key, 201, body)

    return result


@router.get("/", response_model=list[ReportPaymentResponse], summary="List payments")
async def list_report_payments(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    practitioner_id: UUID | None = None,
    method: PaymentMethod | None = None,
    paid_from: datetime | None = None,
    paid_to: datetime | None = None,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> list[ReportPayment]:
    repo = ReportPaymentRepository(db)
    return repo.get_all(
        tenant_id,
        skip=skip,
        limit=limit,
        practitioner_id=practitioner_id,
        method=method,
        paid_from=paid_from,
        paid_to=paid_to,
    )


@router.get("/stats", response_model=PaymentStatsResponse, summary="Payment totals")
async def get_report_payment_stats(
    days: int = Query(default=30, ge=1, le=3650),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> PaymentStatsResponse:
    """Count, totals and average net value of payments in the last ``days`` days."""
    return ReportPaymentService(db).get_stats(tenant_id, days)


@router.get(
    "/{payment_id}",
    response_model=ReportPaymentResponse,
    summary="Get payment",
    responses={404: {"description": "Payment not found"}},
)
async def get_report_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> ReportPaymentResponse:
    payment = ReportPaymentService(db).get_payment(tenant_id, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.patch(
    "/{payment_id}",
    response_model=ReportPaymentResponse,
    summary="Update payment method or observations",
    responses={
        404: {"description": "Payment not found"},
        422: {"description": "Validation error"},
    },
)
async def update_report_payment(
    payment_id: UUID,
    data: ReportPaymentUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
    actor: str | None = Depends(get_current_actor),
) -> ReportPaymentResponse:
    """Amounts and paid reports cannot be changed; only bookkeeping fields."""
    payment = ReportPaymentService(db).update_payment(
        tenant_id, payment_id, data, updated_by=actor
    )
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.get(
    "/{payment_id}/receipt",
    response_model=ReceiptResponse,
    summary="Get receipt data",
    responses={404: {"description": "Payment not found"}},
)
async def get_report_payment_receipt(
    payment_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant),
) -> ReceiptResponse:
    """Data and document URL of the receipt for a payment."""
    receipt = ReportPaymentService(db).get_receipt(tenant_id, payment_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Payment not found")
    return receipt
