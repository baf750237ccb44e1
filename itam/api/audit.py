"""
Audit log endpoints.

Read-only by construction: there is no route that updates or
deletes an entry.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from itam.api.deps import require_permission
from itam.errors import NotFound
from itam.models.base import get_db
from itam.schemas.audit import (
    AuditLogDetailResponse,
    AuditLogResponse,
    AuditPage,
    AuditQuery,
)
from itam.security import Identity
from itam.services.audit_service import AuditService, total_pages

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=AuditPage)
def list_audit(
    query: Annotated[AuditQuery, Query()],
    identity: Identity = Depends(require_permission("audit", "read")),
    db: Session = Depends(get_db),
):
    """
    Newest first, filterable by module, action, actor, entity,
    status and date range.
    """
    items, total = AuditService(db).list(query)
    return AuditPage(
        page=query.page,
        limit=query.limit,
        total=total,
        total_pages=total_pages(total, query.limit),
        items=[AuditLogResponse.model_validate(i) for i in items],
    )


@router.get("/{audit_id}", response_model=AuditLogDetailResponse)
def get_audit_entry(
    audit_id: int,
    identity: Identity = Depends(require_permission("audit", "read")),
    db: Session = Depends(get_db),
):
    """One entry including its sanitized before/after snapshots."""
    entry = AuditService(db).get(audit_id)
    if not entry:
        raise NotFound(f"Audit entry {audit_id} not found")
    return entry
