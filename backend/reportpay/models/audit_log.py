"""AuditLog model for tracking state changes to payment entities."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, func

from reportpay.core.database import Base
from reportpay.models.shared import DEFAULT_TENANT_ID, UUIDType, generate_uuid


class AuditLog(Base):
    """AuditLog model - records state changes to reports and payments."""

    __tablename__ = "audit_logs"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    tenant_id = Column(
        UUIDType,
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_TENANT_ID,
    )
    resource_type = Column(String(50), nullable=False, index=True)
    resource_id = Column(UUIDType, nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True)
    changes = Column(JSON, nullable=False, default=dict)
    actor_type = Column(String(50), nullable=False)
    actor_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
