from uuid import UUID

from fastapi import HTTPException, Request

from reportpay.models.shared import DEFAULT_TENANT_ID


def get_current_tenant(request: Request) -> UUID:
    """Resolve the tenant from the ``X-Tenant-Id`` header.

    Access control happens upstream; requests without the header fall back to
    the default tenant.
    """
    tenant_header = request.headers.get("X-Tenant-Id")
    if not tenant_header:
        return DEFAULT_TENANT_ID
    try:
        return UUID(tenant_header)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-Tenant-Id header") from None


def get_current_actor(request: Request) -> str | None:
    """Identifier of the operator recorded on payments and audit entries."""
    return request.headers.get("X-User-Id") or None
