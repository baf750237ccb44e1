"""
Pydantic schemas for employees, assets and fingerprint enrollments.

These entities are kept minimal: they exist to drive the
sequence, permission and audit paths.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from itam.models.enums import (
    AssetStatus,
    AssigneeType,
    EnrollmentStatus,
)


# --- Employee Schemas ---

class EmployeeCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=100)


class EmployeeUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    full_name: str | None = Field(default=None, min_length=2, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=100)
    is_active: bool | None = None


class EmployeeResponse(BaseModel):
    id: int
    employee_id: str
    full_name: str
    email: str | None
    department: str | None
    title: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Asset Schemas ---

class AssetCreate(BaseModel):
    asset_tag: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=50)
    serial_number: str | None = Field(default=None, max_length=100)
    status: AssetStatus = AssetStatus.ACTIVE


class AssetUpdate(BaseModel):
    """Descriptive fields only. Status and assignment have their own flows."""
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=50)
    serial_number: str | None = Field(default=None, max_length=100)


class AssetAssign(BaseModel):
    assignee_type: AssigneeType
    employee_id: int | None = None
    assignee_name: str | None = Field(default=None, min_length=2, max_length=200)
    note: str | None = None

    @model_validator(mode="after")
    def assignee_must_be_named(self):
        if self.assignee_type == AssigneeType.EMPLOYEE and self.employee_id is None:
            raise ValueError("employee_id is required for employee assignments")
        if self.assignee_type == AssigneeType.EXTERNAL and not self.assignee_name:
            raise ValueError("assignee_name is required for external assignments")
        return self


class AssetUnassign(BaseModel):
    note: str | None = None


class AssetStatusUpdate(BaseModel):
    status: AssetStatus
    note: str | None = None


class AssetResponse(BaseModel):
    id: int
    asset_tag: str
    name: str
    category: str
    serial_number: str | None
    status: AssetStatus
    assignee_type: AssigneeType | None
    assignee_employee_id: int | None
    assignee_name: str | None
    assigned_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Fingerprint Enrollment Schemas ---

class EnrollmentCreate(BaseModel):
    assignee_type: AssigneeType
    employee_id: int | None = None
    external_full_name: str | None = Field(default=None, max_length=200)
    attendance_employee_no: str = Field(min_length=1, max_length=50)
    it_remarks: str | None = None

    @model_validator(mode="after")
    def assignee_must_be_named(self):
        if self.assignee_type == AssigneeType.EMPLOYEE and self.employee_id is None:
            raise ValueError("employee_id is required for employee enrollments")
        if self.assignee_type == AssigneeType.EXTERNAL and not (
            self.external_full_name and self.external_full_name.strip()
        ):
            raise ValueError("external_full_name is required for external enrollments")
        return self


class EnrollmentUpdate(BaseModel):
    attendance_employee_no: str | None = Field(default=None, min_length=1, max_length=50)
    it_remarks: str | None = None
    external_full_name: str | None = Field(default=None, min_length=1, max_length=200)


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus
    hr_signer_name: str | None = Field(default=None, max_length=200)
    note: str | None = None


class EnrollmentResponse(BaseModel):
    id: int
    doc_number: str
    assignee_type: AssigneeType
    employee_id: int | None
    external_full_name: str | None
    attendance_employee_no: str
    status: EnrollmentStatus
    hr_signer_name: str | None
    hr_signed_at: datetime | None
    it_remarks: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
