"""
Module definition model.

A module is a business area ("assets", "employees") with the
ordered list of actions that can be granted inside it.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.base import Base


READ_ACTION = "read"
DEFAULT_ACTIONS = ["read", "create", "update", "delete"]


def normalize_actions(actions: list[str] | None) -> list[str]:
    """Dedupe preserving order and make sure "read" is always declared."""
    ordered = [READ_ACTION]
    for action in actions if actions is not None else DEFAULT_ACTIONS:
        action = action.strip()
        if action and action not in ordered:
            ordered.append(action)
    return ordered


class ModuleDefinition(Base):
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(500), nullable=True, default=None
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )
    actions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: list(DEFAULT_ACTIONS)
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "actions": list(self.actions or []),
        }

    def __repr__(self) -> str:
        return f"<ModuleDefinition {self.key}>"
