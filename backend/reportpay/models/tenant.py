from sqlalchemy import Column, DateTime, String, func

from reportpay.core.database import Base
from reportpay.models.shared import UUIDType, generate_uuid


class Tenant(Base):
    """A clinic scoping every report, price and payment."""

    __tablename__ = "tenants"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    legal_name = Column(String(255), nullable=True)
    tax_id = Column(String(32), nullable=True)
    default_currency = Column(String(3), nullable=False, default="BRL")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
