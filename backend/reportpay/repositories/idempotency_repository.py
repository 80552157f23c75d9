"""Repository for IdempotencyRecord CRUD operations."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from reportpay.models.idempotency_record import IdempotencyRecord
from reportpay.models.shared import generate_uuid


class IdempotencyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_key(self, tenant_id: UUID, idempotency_key: str) -> IdempotencyRecord | None:
        return (
            self.db.query(IdempotencyRecord)
            .filter(
                IdempotencyRecord.tenant_id == tenant_id,
                IdempotencyRecord.idempotency_key == idempotency_key,
            )
            .first()
        )

    def create(
        self,
        *,
        tenant_id: UUID,
        idempotency_key: str,
        request_method: str,
        request_path: str,
        request_fingerprint: str | None = None,
    ) -> IdempotencyRecord:
        record = IdempotencyRecord(
            id=generate_uuid(),
            tenant_id=tenant_id,
            idempotency_key=idempotency_key,
            request_method=request_method,
            request_path=request_path,
            request_fingerprint=request_fingerprint,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def update_fingerprint(self, record: IdempotencyRecord, fingerprint: str) -> IdempotencyRecord:
        record.request_fingerprint = fingerprint  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(record)
        return record

    def update_response(
        self,
        record: IdempotencyRecord,
        response_status: int,
        response_body: dict[str, Any],
    ) -> IdempotencyRecord:
        record.response_status = response_status  # type: ignore[assignment]
        record.response_body = response_body  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(record)
        return record
