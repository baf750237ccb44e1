"""
Hardware asset model.

Only the fields the assignment and status flows touch are
modelled; each mutation is mirrored into the audit log and
the asset's own event timeline.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.base import Base
from itam.models.enums import AssetStatus, AssigneeType


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_tag: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    serial_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[AssetStatus] = mapped_column(
        SAEnum(
            AssetStatus,
            name="asset_status_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=AssetStatus.ACTIVE,
    )

    # Current assignment, all null while unassigned
    assignee_type: Mapped[AssigneeType | None] = mapped_column(
        SAEnum(
            AssigneeType,
            name="assignee_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=True,
    )
    assignee_employee_id: Mapped[int | None] = mapped_column(
        ForeignKey("employees.id"), nullable=True
    )
    assignee_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_assigned(self) -> bool:
        return self.assignee_type is not None

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "asset_tag": self.asset_tag,
            "name": self.name,
            "category": self.category,
            "serial_number": self.serial_number,
            "status": self.status.value,
            "current_assignment": {
                "assignee_type": self.assignee_type.value,
                "employee_id": self.assignee_employee_id,
                "assignee_name": self.assignee_name,
                "assigned_at": self.assigned_at.isoformat(),
            } if self.is_assigned else None,
        }

    def __repr__(self) -> str:
        return f"<Asset {self.asset_tag} ({self.status.value})>"
