from reportpay.repositories.audit_log_repository import AuditLogRepository
from reportpay.repositories.idempotency_repository import IdempotencyRepository
from reportpay.repositories.practitioner_repository import PractitionerRepository
from reportpay.repositories.report_payment_repository import ReportPaymentRepository
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.repositories.report_repository import ReportRepository
from reportpay.repositories.tenant_repository import TenantRepository

__all__ = [
    "AuditLogRepository",
    "IdempotencyRepository",
    "PractitionerRepository",
    "ReportPaymentRepository",
    "ReportPriceRepository",
    "ReportRepository",
    "TenantRepository",
]
