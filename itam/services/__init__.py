"""Business logic services."""

from itam.services.sequence_service import SequenceService
from itam.services.permission_service import (
    Decision,
    PermissionCache,
    PermissionStore,
    authorize,
    check_permission,
)
from itam.services.audit_service import AuditService, EntityEventService, sanitize
from itam.services.module_service import ModuleService
from itam.services.employee_service import EmployeeService
from itam.services.asset_service import AssetService
from itam.services.fingerprint_service import FingerprintService

__all__ = [
    "SequenceService",
    "Decision",
    "PermissionCache",
    "PermissionStore",
    "authorize",
    "check_permission",
    "AuditService",
    "EntityEventService",
    "sanitize",
    "ModuleService",
    "EmployeeService",
    "AssetService",
    "FingerprintService",
]
