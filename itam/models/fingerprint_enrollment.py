"""
Fingerprint enrollment model.

Paperwork for registering a person on an attendance device.
doc_number (FP-2025-00007) is minted from a per-year counter
and is unique across all years.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.base import Base
from itam.models.enums import AssigneeType, EnrollmentStatus


# Where an enrollment may go next. cancelled is terminal; a signed
# document can still be voided.
VALID_TRANSITIONS: dict[EnrollmentStatus, set[EnrollmentStatus]] = {
    EnrollmentStatus.ASSIGNED: {
        EnrollmentStatus.PENDING_HR_SIGNATURE,
        EnrollmentStatus.SIGNED,
        EnrollmentStatus.CANCELLED,
    },
    EnrollmentStatus.PENDING_HR_SIGNATURE: {
        EnrollmentStatus.ASSIGNED,
        EnrollmentStatus.SIGNED,
        EnrollmentStatus.CANCELLED,
    },
    EnrollmentStatus.SIGNED: {EnrollmentStatus.CANCELLED},
    EnrollmentStatus.CANCELLED: set(),
}


class FingerprintEnrollment(Base):
    __tablename__ = "fingerprint_enrollments"

    id: Mapped[int] = mapped_column(primary_key=True)
    doc_number: Mapped[str] = mapped_column(
        String(30), unique=True, nullable=False, index=True
    )
    assignee_type: Mapped[AssigneeType] = mapped_column(
        SAEnum(
            AssigneeType,
            name="enrollment_assignee_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
    )
    employee_id: Mapped[int | None] = mapped_column(
        ForeignKey("employees.id"), nullable=True, index=True
    )
    external_full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    attendance_employee_no: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[EnrollmentStatus] = mapped_column(
        SAEnum(
            EnrollmentStatus,
            name="enrollment_status_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=EnrollmentStatus.ASSIGNED,
    )
    hr_signer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    hr_signed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    it_remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_username: Mapped[str | None] = mapped_column(String(150), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def can_transition_to(self, new_status: EnrollmentStatus) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "doc_number": self.doc_number,
            "assignee_type": self.assignee_type.value,
            "employee_id": self.employee_id,
            "external_full_name": self.external_full_name,
            "attendance_employee_no": self.attendance_employee_no,
            "status": self.status.value,
            "hr_signer_name": self.hr_signer_name,
            "hr_signed_at": self.hr_signed_at.isoformat() if self.hr_signed_at else None,
            "it_remarks": self.it_remarks,
        }

    def __repr__(self) -> str:
        return f"<FingerprintEnrollment {self.doc_number} ({self.status.value})>"
