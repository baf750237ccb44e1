"""
Staff permission model.

One row per (role, module_key). Only the staff role is stored:
admin and auditor grants are implied by the role itself.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.base import Base
from itam.models.enums import Role


class Permission(Base):
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("role", "module_key", name="uq_permission_role_module"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="role_enum", create_constraint=True),
        nullable=False,
        default=Role.STAFF,
        index=True,
    )
    module_key: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )
    actions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def snapshot(self) -> dict:
        return {
            "role": self.role.value,
            "module_key": self.module_key,
            "actions": list(self.actions or []),
        }

    def __repr__(self) -> str:
        return f"<Permission {self.role.value}:{self.module_key} {self.actions}>"
