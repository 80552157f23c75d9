from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, func

from reportpay.core.database import Base
from reportpay.models.shared import DEFAULT_TENANT_ID, UUIDType, generate_uuid


class Practitioner(Base):
    """Physician who signs reports and receives payment for them."""

    __tablename__ = "practitioners"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    tenant_id = Column(
        UUIDType,
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_TENANT_ID,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    license_number = Column(String(50), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
