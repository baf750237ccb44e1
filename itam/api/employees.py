"""
Employee endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from itam.api.deps import audit_entry, get_audit_context, require_permission
from itam.errors import ItamError
from itam.models.base import get_db
from itam.models.enums import AuditStatus
from itam.schemas.entities import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from itam.security import AuditContext, Identity
from itam.services.audit_service import AuditService
from itam.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("", response_model=list[EmployeeResponse])
def list_employees(
    identity: Identity = Depends(require_permission("employees", "read")),
    db: Session = Depends(get_db),
):
    return EmployeeService(db).list_employees()


@router.post("", response_model=EmployeeResponse, status_code=201)
def create_employee(
    request: EmployeeCreate,
    identity: Identity = Depends(require_permission("employees", "create")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Create an employee with the next sequential EMP identifier."""
    service = EmployeeService(db)
    try:
        employee = service.create_employee(request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    AuditService(db).record(audit_entry(
        identity, context,
        action="EMPLOYEE_CREATE",
        module="employees",
        status=AuditStatus.SUCCESS,
        entity_type="Employee",
        entity_id=str(employee.id),
        summary=f"Created employee {employee.employee_id}",
        after=employee.snapshot(),
    ))
    return employee


@router.get("/{employee_pk}", response_model=EmployeeResponse)
def get_employee(
    employee_pk: int,
    identity: Identity = Depends(require_permission("employees", "read")),
    db: Session = Depends(get_db),
):
    return EmployeeService(db).get_employee(employee_pk)


@router.patch("/{employee_pk}", response_model=EmployeeResponse)
def update_employee(
    employee_pk: int,
    request: EmployeeUpdate,
    identity: Identity = Depends(require_permission("employees", "update")),
    context: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    service = EmployeeService(db)
    try:
        before, employee = service.update_employee(employee_pk, request)
        db.commit()
    except ItamError:
        db.rollback()
        raise

    AuditService(db).record(audit_entry(
        identity, context,
        action="EMPLOYEE_UPDATE",
        module="employees",
        status=AuditStatus.SUCCESS,
        entity_type="Employee",
        entity_id=str(employee.id),
        summary=f"Updated employee {employee.full_name} ({employee.employee_id})",
        before=before,
        after=employee.snapshot(),
    ))
    return employee
