"""Audit API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.modules.audit.schemas import AuditLogRead
from app.modules.audit.service import AuditService, get_audit_service
from app.modules.identity.schemas import IdentityContext
from app.modules.identity.service import get_current_identity
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/admin/audit", tags=["audit"])


@router.get("/logs", response_model=Page[AuditLogRead])
async def list_logs(
    entity_id: str | None = Query(default=None, max_length=128),
    pagination=Depends(get_pagination_params),
    service: AuditService = Depends(get_audit_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Page[AuditLogRead]:
    """List admin override audit entries, optionally for one booking."""
    items, total = await service.list_logs(
        identity,
        pagination.limit,
        pagination.offset,
        entity_id=entity_id,
    )
    serialized = [AuditLogRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
