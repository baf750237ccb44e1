"""
Module catalogue endpoints.

Any authenticated role may list modules; only admins create
or edit them. Non-admin listings hide inactive modules.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from itam.api.deps import (
    audit_entry,
    get_audit_context,
    get_identity,
    get_permission_cache,
    require_role,
)
from itam.errors import ItamError
from itam.models.base import get_db
from itam.models.enums import AuditStatus, Role
from itam.schemas.module import ModuleCreate, ModuleResponse, ModuleUpdate
from itam.security import AuditContext, Identity
from itam.services.audit_service import AuditService
from itam.services.module_service import ModuleService
from itam.services.permission_service import PermissionCache

router = APIRouter(prefix="/modules", tags=["Modules"])

AUDIT_MODULE = "settings"


@router.get("", response_model=list[ModuleResponse])
def list_modules(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    service = ModuleService(db)
    return service.list_modules(include_inactive=identity.role == Role.ADMIN)


@router.post("", response_model=ModuleResponse, status_code=201)
def create_module(
    request: ModuleCreate,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Create a module. "read" is always part of its actions."""
    service = ModuleService(db)
    try:
        module = service.create_module(request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    AuditService(db).record(audit_entry(
        identity, context,
        action="MODULE_CREATE",
        module=AUDIT_MODULE,
        status=AuditStatus.SUCCESS,
        entity_type="Module",
        entity_id=str(module.id),
        summary=f"Created module {module.key}",
        after=module.snapshot(),
    ))
    return module


@router.patch("/{module_id}", response_model=ModuleResponse)
def update_module(
    module_id: int,
    request: ModuleUpdate,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    context: AuditContext = Depends(get_audit_context),
    cache: PermissionCache = Depends(get_permission_cache),
    db: Session = Depends(get_db),
):
    service = ModuleService(db)
    try:
        before, module = service.update_module(module_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    # Declared actions bound staff grants, so cached grants may be too wide now
    cache.invalidate(module.key)

    AuditService(db).record(audit_entry(
        identity, context,
        action="MODULE_UPDATE",
        module=AUDIT_MODULE,
        status=AuditStatus.SUCCESS,
        entity_type="Module",
        entity_id=str(module.id),
        summary=f"Updated module {module.key}",
        before=before,
        after=module.snapshot(),
    ))
    return module
