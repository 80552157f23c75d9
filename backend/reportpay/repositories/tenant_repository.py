"""Tenant repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.models.tenant import Tenant


class TenantRepository:
    """Repository for Tenant model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def create(
        self,
        name: str,
        tenant_id: UUID | None = None,
        legal_name: str | None = None,
        tax_id: str | None = None,
    ) -> Tenant:
        tenant = Tenant(name=name, legal_name=legal_name, tax_id=tax_id)
        if tenant_id is not None:
            tenant.id = tenant_id
        self.db.add(tenant)
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
