"""
Asset endpoints.

Every mutation commits first, then writes the audit entry and
the asset event. The two trail writes are independent of each
other and neither can undo the mutation.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from itam.api.deps import audit_entry, get_audit_context, require_permission
from itam.errors import ItamError
from itam.models.base import get_db
from itam.models.asset import Asset
from itam.models.enums import AssetEventType, AuditStatus
from itam.schemas.audit import EntityEventPage, EntityEventResponse, EventInput
from itam.schemas.entities import (
    AssetAssign,
    AssetCreate,
    AssetResponse,
    AssetStatusUpdate,
    AssetUnassign,
    AssetUpdate,
)
from itam.security import AuditContext, Identity
from itam.services.asset_service import AssetService
from itam.services.audit_service import AuditService, asset_events, total_pages

router = APIRouter(prefix="/assets", tags=["Assets"])


def _record(
    db: Session,
    identity: Identity,
    context: AuditContext,
    asset: Asset,
    action: str,
    summary: str,
    before: dict | None,
    event_type: AssetEventType | None = None,
    note: str | None = None,
) -> None:
    asset_id = asset.id
    after = asset.snapshot()
    AuditService(db).record(audit_entry(
        identity, context,
        action=action,
        module="assets",
        status=AuditStatus.SUCCESS,
        entity_type="Asset",
        entity_id=str(asset_id),
        summary=summary,
        before=before,
        after=after,
    ))
    if event_type is not None:
        asset_events(db).record(EventInput(
            entity_id=asset_id,
            type=event_type.value,
            before=before,
            after=after,
            note=note,
            actor_user_id=identity.user_id,
            actor_username=identity.username,
        ))


@router.post("", response_model=AssetResponse, status_code=201)
def create_asset(
    request: AssetCreate,
    identity: Identity = Depends(require_permission("assets", "create")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = AssetService(db)
    try:
        asset = service.create_asset(request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, asset, "ASSET_CREATE",
            f"Created asset {asset.asset_tag}", before=None,
            event_type=AssetEventType.UPDATE_DETAILS, note="Asset created")
    return asset


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(
    asset_id: int,
    identity: Identity = Depends(require_permission("assets", "read")),
    db: Session = Depends(get_db),
):
    return AssetService(db).get_asset(asset_id)


@router.patch("/{asset_id}", response_model=AssetResponse)
def update_asset(
    asset_id: int,
    request: AssetUpdate,
    identity: Identity = Depends(require_permission("assets", "update")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = AssetService(db)
    try:
        before, asset = service.update_details(asset_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, asset, "ASSET_UPDATE",
            f"Updated asset {asset.asset_tag}",
            before=before, event_type=AssetEventType.UPDATE_DETAILS,
            note="Asset details updated")
    return asset


@router.post("/{asset_id}/assign", response_model=AssetResponse)
def assign_asset(
    asset_id: int,
    request: AssetAssign,
    identity: Identity = Depends(require_permission("assets", "assign")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = AssetService(db)
    try:
        before, asset = service.assign(asset_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, asset, "ASSET_ASSIGN",
            f"Assigned {asset.asset_tag} to {asset.assignee_name}",
            before=before, event_type=AssetEventType.ASSIGN, note=request.note)
    return asset


@router.post("/{asset_id}/unassign", response_model=AssetResponse)
def unassign_asset(
    asset_id: int,
    request: AssetUnassign,
    identity: Identity = Depends(require_permission("assets", "assign")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = AssetService(db)
    try:
        before, asset = service.unassign(asset_id)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, asset, "ASSET_UNASSIGN",
            f"Unassigned {asset.asset_tag}",
            before=before, event_type=AssetEventType.UNASSIGN, note=request.note)
    return asset


@router.post("/{asset_id}/status", response_model=AssetResponse)
def change_asset_status(
    asset_id: int,
    request: AssetStatusUpdate,
    identity: Identity = Depends(require_permission("assets", "status")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = AssetService(db)
    try:
        before, asset = service.change_status(asset_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, asset, "ASSET_STATUS_CHANGE",
            f"Changed {asset.asset_tag} status to {asset.status.value}",
            before=before, event_type=AssetEventType.STATUS_CHANGE,
            note=request.note)
    return asset


@router.get("/{asset_id}/events", response_model=EntityEventPage)
def list_asset_events(
    asset_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=100),
    identity: Identity = Depends(require_permission("assets", "read")),
    db: Session = Depends(get_db),
):
    """The asset's own timeline, newest first."""
    AssetService(db).get_asset(asset_id)
    items, total = asset_events(db).list_for(asset_id, page, limit)
    return EntityEventPage(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages(total, limit),
        items=[EntityEventResponse.model_validate(i) for i in items],
    )
