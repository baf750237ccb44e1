"""
Fingerprint enrollment endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from itam.api.deps import audit_entry, get_audit_context, require_permission
from itam.errors import ItamError
from itam.models.base import get_db
from itam.models.enums import AuditStatus, FingerprintEventType
from itam.models.fingerprint_enrollment import FingerprintEnrollment
from itam.schemas.audit import EntityEventPage, EntityEventResponse, EventInput
from itam.schemas.entities import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    EnrollmentUpdate,
)
from itam.security import AuditContext, Identity
from itam.services.audit_service import AuditService, fingerprint_events, total_pages
from itam.services.fingerprint_service import FingerprintService

router = APIRouter(prefix="/fingerprints", tags=["Fingerprints"])


def _record(
    db: Session,
    identity: Identity,
    context: AuditContext,
    enrollment: FingerprintEnrollment,
    action: str,
    summary: str,
    event_type: FingerprintEventType,
    note: str,
    before: dict | None = None,
    after: dict | None = None,
) -> None:
    enrollment_id = enrollment.id
    fingerprint_events(db).record(EventInput(
        entity_id=enrollment_id,
        type=event_type.value,
        before=before,
        after=after,
        note=note,
        actor_user_id=identity.user_id,
        actor_username=identity.username,
    ))
    AuditService(db).record(audit_entry(
        identity, context,
        action=action,
        module="fingerprints",
        status=AuditStatus.SUCCESS,
        entity_type="FingerprintEnrollment",
        entity_id=str(enrollment_id),
        summary=summary,
        before=before,
        after=after,
    ))


@router.post("", response_model=EnrollmentResponse, status_code=201)
def create_enrollment(
    request: EnrollmentCreate,
    identity: Identity = Depends(require_permission("fingerprints", "create")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Create an enrollment with the next FP-{year}-NNNNN document number."""
    service = FingerprintService(db)
    try:
        enrollment = service.create_enrollment(request, created_by=identity.username)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, enrollment, "FP_ENROLL_CREATE",
            f"Created fingerprint enrollment {enrollment.doc_number}",
            FingerprintEventType.CREATE,
            f"Created enrollment ({enrollment.status.value})",
            after=enrollment.snapshot())
    return enrollment


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
def get_enrollment(
    enrollment_id: int,
    identity: Identity = Depends(require_permission("fingerprints", "read")),
    db: Session = Depends(get_db),
):
    return FingerprintService(db).get_enrollment(enrollment_id)


@router.patch("/{enrollment_id}", response_model=EnrollmentResponse)
def update_enrollment(
    enrollment_id: int,
    request: EnrollmentUpdate,
    identity: Identity = Depends(require_permission("fingerprints", "update")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = FingerprintService(db)
    try:
        before, enrollment = service.update_enrollment(enrollment_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    _record(db, identity, context, enrollment, "FP_ENROLL_UPDATE",
            f"Updated fingerprint enrollment {enrollment.doc_number}",
            FingerprintEventType.UPDATE, "Updated enrollment fields",
            before=before, after=enrollment.snapshot())
    return enrollment


@router.patch("/{enrollment_id}/status", response_model=EnrollmentResponse)
def change_enrollment_status(
    enrollment_id: int,
    request: EnrollmentStatusUpdate,
    identity: Identity = Depends(require_permission("fingerprints", "update")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = FingerprintService(db)
    try:
        before, enrollment = service.change_status(enrollment_id, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    note = (request.note or "").strip() or f"Status -> {request.status.value}"
    _record(db, identity, context, enrollment, "FP_ENROLL_STATUS",
            f"Changed status {enrollment.doc_number} -> {request.status.value}",
            FingerprintEventType.STATUS_CHANGE, note,
            before=before, after=enrollment.snapshot())
    return enrollment


@router.post("/{enrollment_id}/print", status_code=202)
def record_print(
    enrollment_id: int,
    identity: Identity = Depends(require_permission("fingerprints", "print")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """
    Record that the HR signature document was printed.

    Rendering happens elsewhere. Nothing is mutated, so the
    trail writes are the whole operation and their failures are
    only logged.
    """
    enrollment = FingerprintService(db).get_enrollment(enrollment_id)
    doc_number = enrollment.doc_number
    _record(db, identity, context, enrollment, "FP_ENROLL_PRINT",
            f"Printed fingerprint enrollment document {doc_number}",
            FingerprintEventType.PRINT, "Printed HR signature document",
            after={"doc_number": doc_number})
    return {"doc_number": doc_number}


@router.get("/{enrollment_id}/events", response_model=EntityEventPage)
def list_enrollment_events(
    enrollment_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=100),
    identity: Identity = Depends(require_permission("fingerprints", "read")),
    db: Session = Depends(get_db),
):
    FingerprintService(db).get_enrollment(enrollment_id)
    items, total = fingerprint_events(db).list_for(enrollment_id, page, limit)
    return EntityEventPage(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages(total, limit),
        items=[EntityEventResponse.model_validate(i) for i in items],
    )
