"""
Asset service: asset creation, assignment and status changes.

Each mutating method returns the before snapshot together with
the asset so the caller can commit and then record the audit
entry and the asset event.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from itam.errors import ConflictError, NotFound, ValidationError
from itam.models.asset import Asset
from itam.models.enums import AssigneeType
from itam.schemas.entities import (
    AssetAssign,
    AssetCreate,
    AssetStatusUpdate,
    AssetUpdate,
)
from itam.services.employee_service import EmployeeService


class AssetService:

    def __init__(self, db: Session):
        self.db = db
        self.employee_service = EmployeeService(db)

    def create_asset(self, request: AssetCreate) -> Asset:
        tag = request.asset_tag.strip()
        existing = self.db.execute(
            select(Asset).where(Asset.asset_tag == tag)
        ).scalar_one_or_none()
        if existing:
            raise ConflictError(f"Asset tag '{tag}' already exists")

        asset = Asset(
            asset_tag=tag,
            name=request.name.strip(),
            category=request.category.strip(),
            serial_number=request.serial_number,
            status=request.status,
        )
        self.db.add(asset)
        self.db.flush()
        return asset

    def get_asset(self, asset_id: int) -> Asset:
        asset = self.db.get(Asset, asset_id)
        if not asset:
            raise NotFound(f"Asset {asset_id} not found")
        return asset

    def assign(self, asset_id: int, request: AssetAssign) -> tuple[dict, Asset]:
        asset = self.get_asset(asset_id)
        before = asset.snapshot()

        if request.assignee_type == AssigneeType.EMPLOYEE:
            try:
                employee = self.employee_service.get_active_employee(
                    request.employee_id
                )
            except NotFound as e:
                raise ValidationError(str(e))
            asset.assignee_employee_id = employee.id
            asset.assignee_name = f"{employee.full_name} ({employee.employee_id})"
        else:
            asset.assignee_employee_id = None
            asset.assignee_name = request.assignee_name.strip()

        asset.assignee_type = request.assignee_type
        asset.assigned_at = datetime.utcnow()
        self.db.flush()
        return before, asset

    def unassign(self, asset_id: int) -> tuple[dict, Asset]:
        asset = self.get_asset(asset_id)
        if not asset.is_assigned:
            raise ValidationError(f"Asset {asset.asset_tag} is not assigned")

        before = asset.snapshot()
        asset.assignee_type = None
        asset.assignee_employee_id = None
        asset.assignee_name = None
        asset.assigned_at = None
        self.db.flush()
        return before, asset

    def change_status(
        self, asset_id: int, request: AssetStatusUpdate
    ) -> tuple[dict, Asset]:
        asset = self.get_asset(asset_id)
        before = asset.snapshot()
        asset.status = request.status
        self.db.flush()
        return before, asset

    def update_details(
        self, asset_id: int, request: AssetUpdate
    ) -> tuple[dict, Asset]:
        asset = self.get_asset(asset_id)
        before = asset.snapshot()
        changes = request.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            asset.name = changes["name"].strip()
        if changes.get("category") is not None:
            asset.category = changes["category"].strip()
        if "serial_number" in changes:
            asset.serial_number = changes["serial_number"]

        self.db.flush()
        return before, asset
