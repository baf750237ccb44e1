"""
Audit log model.

Records every state-changing operation across all modules,
with sanitized before/after snapshots of the entity.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text, JSON, Index, Enum as SAEnum, event
from sqlalchemy.orm import Mapped, mapped_column

from itam.errors import ImmutableRecordError
from itam.models.base import Base
from itam.models.enums import AuditStatus


class AuditLog(Base):
    """
    Immutable record of a system event.

    Audit logs are append-only. You never update or delete an
    audit record; the mapper events below reject both at flush.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_module_created", "module", "created_at"),
        Index("ix_audit_log_actor_created", "actor_user_id", "created_at"),
        Index("ix_audit_log_entity_created", "entity_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    actor_user_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    actor_username: Mapped[str | None] = mapped_column(
        String(150), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    module: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[AuditStatus] = mapped_column(
        SAEnum(AuditStatus, name="audit_status_enum", create_constraint=True),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    before: Mapped[dict | list | None] = mapped_column(JSON, nullable=True)
    after: Mapped[dict | list | None] = mapped_column(JSON, nullable=True)
    ip: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.module} ({self.status.value})>"


def reject_mutation(mapper, connection, target):
    raise ImmutableRecordError(
        f"{type(target).__name__} {target.id} is append-only"
    )


event.listen(AuditLog, "before_update", reject_mutation)
event.listen(AuditLog, "before_delete", reject_mutation)
