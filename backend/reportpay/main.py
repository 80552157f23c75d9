import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reportpay.core.config import settings
from reportpay.routers import practitioners, report_payments, report_prices, reports

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Reports", "description": "Signed reports and their payment status."},
    {"name": "Report Payments", "description": "Pay batches of reports and read receipts."},
    {"name": "Report Prices", "description": "Configured value per practitioner and exam type."},
    {"name": "Practitioners", "description": "Practitioners receiving report payments."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Payment of practitioners for signed reports: batch selection, "
        "reconciliation and atomic commit."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count", "Idempotency-Replayed"],
)

app.include_router(reports.router, prefix="/v1/reports", tags=["Reports"])
app.include_router(
    report_payments.router,
    prefix="/v1/report_payments",
    tags=["Report Payments"],
)
app.include_router(report_prices.router, prefix="/v1/report_prices", tags=["Report Prices"])
app.include_router(practitioners.router, prefix="/v1/practitioners", tags=["Practitioners"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
