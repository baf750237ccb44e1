"""
Fingerprint enrollment service.

Document numbers come from a per-year counter (fp-docs-2025),
so numbering restarts at 00001 every January and two concurrent
creations can never mint the same number.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from itam.config import get_settings
from itam.errors import ConflictError, NotFound, ValidationError
from itam.models.enums import AssigneeType, EnrollmentStatus
from itam.models.fingerprint_enrollment import FingerprintEnrollment
from itam.schemas.entities import (
    EnrollmentCreate,
    EnrollmentStatusUpdate,
    EnrollmentUpdate,
)
from itam.services.employee_service import EmployeeService
from itam.services.identifiers import (
    current_year,
    fingerprint_doc_number,
    fingerprint_series_key,
)
from itam.services.sequence_service import SequenceService


class FingerprintService:

    def __init__(self, db: Session):
        self.db = db
        self.sequences = SequenceService(db)
        self.employee_service = EmployeeService(db)

    def next_doc_number(self, now: datetime | None = None) -> str:
        year = current_year(now)
        seq = self.sequences.next_value(fingerprint_series_key(year))
        return fingerprint_doc_number(year, seq, get_settings().FP_DOC_WIDTH)

    def create_enrollment(
        self,
        request: EnrollmentCreate,
        created_by: str | None = None,
        now: datetime | None = None,
    ) -> FingerprintEnrollment:
        if request.assignee_type == AssigneeType.EMPLOYEE:
            try:
                self.employee_service.get_active_employee(request.employee_id)
            except NotFound as e:
                raise ValidationError(str(e))

        is_external = request.assignee_type == AssigneeType.EXTERNAL
        enrollment = FingerprintEnrollment(
            doc_number=self.next_doc_number(now),
            assignee_type=request.assignee_type,
            employee_id=None if is_external else request.employee_id,
            external_full_name=request.external_full_name.strip() if is_external else None,
            attendance_employee_no=request.attendance_employee_no.strip(),
            status=EnrollmentStatus.ASSIGNED,
            it_remarks=request.it_remarks,
            created_by_username=created_by,
        )
        self.db.add(enrollment)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Document number {enrollment.doc_number} already exists"
            ) from e
        return enrollment

    def get_enrollment(self, enrollment_id: int) -> FingerprintEnrollment:
        enrollment = self.db.get(FingerprintEnrollment, enrollment_id)
        if not enrollment:
            raise NotFound(f"Enrollment {enrollment_id} not found")
        return enrollment

    def change_status(
        self, enrollment_id: int, request: EnrollmentStatusUpdate
    ) -> tuple[dict, FingerprintEnrollment]:
        """
        Move to a new status along VALID_TRANSITIONS.

        Signing requires the HR signer's name.
        """
        enrollment = self.get_enrollment(enrollment_id)
        if not enrollment.can_transition_to(request.status):
            raise ValidationError(
                f"Cannot move {enrollment.doc_number} from "
                f"{enrollment.status.value} to {request.status.value}"
            )
        before = enrollment.snapshot()

        if request.status == EnrollmentStatus.SIGNED:
            signer = (request.hr_signer_name or "").strip()
            if not signer:
                raise ValidationError("hr_signer_name is required for signed")
            enrollment.hr_signer_name = signer
            enrollment.hr_signed_at = datetime.utcnow()

        enrollment.status = request.status
        self.db.flush()
        return before, enrollment

    def update_enrollment(
        self, enrollment_id: int, request: EnrollmentUpdate
    ) -> tuple[dict, FingerprintEnrollment]:
        """
        Edit the free-text fields of an enrollment.

        The external name can only change on an external
        enrollment; for employees it is ignored.
        """
        enrollment = self.get_enrollment(enrollment_id)
        before = enrollment.snapshot()
        changes = request.model_dump(exclude_unset=True)

        if changes.get("attendance_employee_no") is not None:
            enrollment.attendance_employee_no = changes["attendance_employee_no"].strip()
        if "it_remarks" in changes:
            enrollment.it_remarks = changes["it_remarks"]
        if (
            enrollment.assignee_type == AssigneeType.EXTERNAL
            and changes.get("external_full_name") is not None
        ):
            enrollment.external_full_name = changes["external_full_name"].strip()

        self.db.flush()
        return before, enrollment
