"""Practitioner repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.models.practitioner import Practitioner
from reportpay.schemas.practitioner import PractitionerCreate


class PractitionerRepository:
    """Repository for Practitioner model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        tenant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        active_only: bool = True,
    ) -> list[Practitioner]:
        query = self.db.query(Practitioner).filter(Practitioner.tenant_id == tenant_id)
        if active_only:
            query = query.filter(Practitioner.active.is_(True))
        return query.order_by(Practitioner.name.asc()).offset(skip).limit(limit).all()

    def get_by_id(self, practitioner_id: UUID, tenant_id: UUID | None = None) -> Practitioner | None:
        query = self.db.query(Practitioner).filter(Practitioner.id == practitioner_id)
        if tenant_id is not None:
            query = query.filter(Practitioner.tenant_id == tenant_id)
        return query.first()

    def create(self, data: PractitionerCreate, tenant_id: UUID) -> Practitioner:
        practitioner = Practitioner(tenant_id=tenant_id, **data.model_dump())
        self.db.add(practitioner)
        self.db.commit()
        self.db.refresh(practitioner)
        return practitioner
