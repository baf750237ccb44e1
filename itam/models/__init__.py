"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from itam.models.base import Base
from itam.models.enums import (
    Role,
    AuditStatus,
    AssetEventType,
    FingerprintEventType,
    AssetStatus,
    AssigneeType,
    EnrollmentStatus,
)
from itam.models.module import ModuleDefinition
from itam.models.permission import Permission
from itam.models.sequence_counter import SequenceCounter
from itam.models.audit_log import AuditLog
from itam.models.employee import Employee
from itam.models.asset import Asset
from itam.models.fingerprint_enrollment import FingerprintEnrollment
from itam.models.entity_event import AssetEvent, FingerprintEvent

__all__ = [
    "Base",
    "Role",
    "AuditStatus",
    "AssetEventType",
    "FingerprintEventType",
    "AssetStatus",
    "AssigneeType",
    "EnrollmentStatus",
    "ModuleDefinition",
    "Permission",
    "SequenceCounter",
    "AuditLog",
    "Employee",
    "Asset",
    "FingerprintEnrollment",
    "AssetEvent",
    "FingerprintEvent",
]
