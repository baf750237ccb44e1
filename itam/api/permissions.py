"""
Staff permission endpoints (admin only).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from itam.api.deps import (
    audit_entry,
    get_audit_context,
    get_permission_cache,
    require_role,
)
from itam.errors import ItamError
from itam.models.base import get_db
from itam.models.enums import AuditStatus, Role
from itam.schemas.module import (
    PermissionResponse,
    StaffGrantResponse,
    StaffPermissionUpsert,
)
from itam.security import AuditContext, Identity
from itam.services.audit_service import AuditService
from itam.services.permission_service import PermissionCache, PermissionStore

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/staff", response_model=list[StaffGrantResponse])
def list_staff_permissions(
    identity: Identity = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """Active modules with their available actions and the staff grant."""
    return PermissionStore(db).list_staff_grants()


@router.get("/staff/{module_key}", response_model=PermissionResponse)
def get_staff_actions(
    module_key: str,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    cache: PermissionCache = Depends(get_permission_cache),
):
    """The grant as the authorization gate currently sees it (cached)."""
    return PermissionResponse(
        role=Role.STAFF.value,
        module_key=module_key,
        actions=sorted(cache.get_actions(module_key)),
    )


@router.put("/staff", response_model=PermissionResponse)
def upsert_staff_permission(
    request: StaffPermissionUpsert,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    context: AuditContext = Depends(get_audit_context),
    cache: PermissionCache = Depends(get_permission_cache),
    db: Session = Depends(get_db),
):
    """
    Replace the staff grant for one module.

    Actions the module does not declare are dropped silently.
    """
    store = PermissionStore(db)
    try:
        before, permission = store.upsert(
            Role.STAFF, request.module_key, request.actions
        )
        db.commit()
    except ItamError:
        db.rollback()
        raise

    cache.invalidate(request.module_key)
    after = permission.snapshot()

    AuditService(db).record(audit_entry(
        identity, context,
        action="PERMISSION_SET",
        module="settings",
        status=AuditStatus.SUCCESS,
        entity_type="Permission",
        entity_id=f"{after['role']}:{after['module_key']}",
        summary=f"Set staff permissions for {request.module_key}",
        before=before,
        after=after,
    ))
    return PermissionResponse(**after)
