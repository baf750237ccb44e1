"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class Role(str, enum.Enum):
    """
    Coarse identity class carried by every access token.

    ADMIN can do everything, AUDITOR can read everything,
    STAFF can do only what its per-module grant lists.
    """
    ADMIN = "admin"
    AUDITOR = "auditor"
    STAFF = "staff"


class AuditStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


class AssetEventType(str, enum.Enum):
    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"
    STATUS_CHANGE = "STATUS_CHANGE"
    UPDATE_DETAILS = "UPDATE_DETAILS"


class FingerprintEventType(str, enum.Enum):
    CREATE = "CREATE"
    STATUS_CHANGE = "STATUS_CHANGE"
    PRINT = "PRINT"
    UPDATE = "UPDATE"


class AssetStatus(str, enum.Enum):
    ACTIVE = "active"
    IN_REPAIR = "in-repair"
    RETIRED = "retired"


class AssigneeType(str, enum.Enum):
    EMPLOYEE = "employee"
    EXTERNAL = "external"


class EnrollmentStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    PENDING_HR_SIGNATURE = "pending_hr_signature"
    SIGNED = "signed"
    CANCELLED = "cancelled"
