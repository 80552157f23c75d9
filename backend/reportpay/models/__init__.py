from reportpay.models.audit_log import AuditLog
from reportpay.models.idempotency_record import IdempotencyRecord
from reportpay.models.practitioner import Practitioner
from reportpay.models.report import Report, ReportStatus
from reportpay.models.report_payment import PaymentMethod, ReportPayment
from reportpay.models.report_price import ReportPrice
from reportpay.models.tenant import Tenant

__all__ = [
    "AuditLog",
    "IdempotencyRecord",
    "PaymentMethod",
    "Practitioner",
    "Report",
    "ReportPayment",
    "ReportPrice",
    "ReportStatus",
    "Tenant",
]
