"""
Employee service: creates employees with sequential IDs.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from itam.config import get_settings
from itam.errors import ConflictError, NotFound
from itam.models.employee import Employee
from itam.schemas.entities import EmployeeCreate, EmployeeUpdate
from itam.services.identifiers import EMPLOYEE_SERIES, employee_id
from itam.services.sequence_service import SequenceService


class EmployeeService:

    def __init__(self, db: Session):
        self.db = db
        self.sequences = SequenceService(db)

    def create_employee(self, request: EmployeeCreate) -> Employee:
        """
        Create an employee with the next EMP identifier.

        The counter increment and the insert share the caller's
        transaction: a rollback releases neither a row nor a gap.
        """
        settings = get_settings()
        seq = self.sequences.next_value(EMPLOYEE_SERIES)
        employee = Employee(
            employee_id=employee_id(
                seq, settings.EMPLOYEE_ID_PREFIX, settings.EMPLOYEE_ID_WIDTH
            ),
            full_name=request.full_name.strip(),
            email=request.email.strip().lower() if request.email else None,
            department=request.department,
            title=request.title,
        )
        self.db.add(employee)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Employee ID {employee.employee_id} already exists"
            ) from e
        return employee

    def update_employee(
        self, employee_pk: int, request: EmployeeUpdate
    ) -> tuple[dict, Employee]:
        """Partial update. The EMP identifier never changes."""
        employee = self.get_employee(employee_pk)
        before = employee.snapshot()
        changes = request.model_dump(exclude_unset=True)

        if changes.get("full_name") is not None:
            employee.full_name = changes["full_name"].strip()
        if "email" in changes:
            email = changes["email"]
            employee.email = email.strip().lower() if email else None
        if "department" in changes:
            employee.department = changes["department"]
        if "title" in changes:
            employee.title = changes["title"]
        if changes.get("is_active") is not None:
            employee.is_active = changes["is_active"]

        self.db.flush()
        return before, employee

    def get_employee(self, employee_pk: int) -> Employee:
        employee = self.db.get(Employee, employee_pk)
        if not employee:
            raise NotFound(f"Employee {employee_pk} not found")
        return employee

    def get_active_employee(self, employee_pk: int) -> Employee:
        employee = self.db.get(Employee, employee_pk)
        if not employee or not employee.is_active:
            raise NotFound(f"Employee {employee_pk} not found or inactive")
        return employee

    def list_employees(self) -> list[Employee]:
        employees = self.db.execute(
            select(Employee).order_by(Employee.employee_id)
        ).scalars().all()
        return list(employees)
