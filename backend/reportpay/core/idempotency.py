"""Idempotent payment submission keyed by the ``Idempotency-Key`` header.

A request under a key stores a fingerprint of its body. Once a response has
been stored, a repeat with the same body replays it and a repeat with a
different body is refused, so a key can never pay two different batches.
Failed requests store no response, so a rejected batch can be corrected and
resubmitted under the same key.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from reportpay.repositories.idempotency_repository import IdempotencyRepository

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"
REPLAYED_HEADER = "Idempotency-Replayed"


@dataclass
class IdempotencyResult:
    """A key seen for the first time; record the response once it succeeds."""

    key: str
    method: str
    path: str
    fingerprint: str | None = None


def request_fingerprint(method: str, path: str, payload: Any) -> str:
    """SHA-256 of the method, path and canonical JSON body."""
    canonical = json.dumps(
        {"method": method, "path": path, "body": payload},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


def check_idempotency(
    request: Request,
    db: Session,
    tenant_id: UUID,
    payload: Any = None,
) -> JSONResponse | IdempotencyResult | None:
    """Resolve the ``Idempotency-Key`` header of a submission.

    Returns:
        - ``None`` when the header is absent.
        - A 422 ``JSONResponse`` when the key already committed another body.
        - The stored response, marked ``Idempotency-Replayed: true``, when the
          same body was already committed under the key.
        - An ``IdempotencyResult`` when the endpoint should proceed.
    """
    key = request.headers.get(IDEMPOTENCY_HEADER)
    if not key:
        return None

    method = request.method
    path = request.url.path
    fingerprint = request_fingerprint(method, path, payload)

    repo = IdempotencyRepository(db)
    existing = repo.get_by_key(tenant_id, key)

    if existing is not None and existing.response_status is not None:
        if existing.request_fingerprint not in (None, fingerprint):
            logger.warning("Idempotency key %s reused with a different request", key)
            return JSONResponse(
                status_code=422,
                content={
                    "detail": {
                        "code": "idempotency_key_reused",
                        "message": "Idempotency-Key was already used for a different request",
                    }
                },
            )
        response = JSONResponse(
            content=existing.response_body,
            status_code=int(existing.response_status),
        )
        response.headers[REPLAYED_HEADER] = "true"
        return response

    if existing is None:
        repo.create(
            tenant_id=tenant_id,
            idempotency_key=key,
            request_method=method,
            request_path=path,
            request_fingerprint=fingerprint,
        )
    elif existing.request_fingerprint != fingerprint:
        # Nothing was committed under the key yet, so a corrected body may take it over
        repo.update_fingerprint(existing, fingerprint)

    return IdempotencyResult(key=key, method=method, path=path, fingerprint=fingerprint)


def record_idempotency_response(
    db: Session,
    tenant_id: UUID,
    key: str,
    status: int,
    body: dict[str, Any],
) -> None:
    """Store the successful response so repeats of the key replay it."""
    repo = IdempotencyRepository(db)
    record = repo.get_by_key(tenant_id, key)
    if record is not None:
        repo.update_response(record, status, body)
