"""
Per-entity timeline models.

Same contract as the audit log (sanitized, append-only) but
scoped to a single entity instance. Each timeline has a closed
set of event types.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text, JSON, ForeignKey, Index, Enum as SAEnum, event
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.audit_log import reject_mutation
from itam.models.base import Base
from itam.models.enums import AssetEventType, FingerprintEventType


class EntityEventMixin:
    """Columns shared by every entity timeline."""

    id: Mapped[int] = mapped_column(primary_key=True)
    before: Mapped[dict | list | None] = mapped_column(JSON, nullable=True)
    after: Mapped[dict | list | None] = mapped_column(JSON, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor_user_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    actor_username: Mapped[str | None] = mapped_column(
        String(150), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )


class AssetEvent(EntityEventMixin, Base):
    __tablename__ = "asset_events"
    __table_args__ = (
        Index("ix_asset_events_asset_created", "asset_id", "created_at"),
    )

    asset_id: Mapped[int] = mapped_column(
        ForeignKey("assets.id"), nullable=False, index=True
    )
    type: Mapped[AssetEventType] = mapped_column(
        SAEnum(AssetEventType, name="asset_event_type_enum", create_constraint=True),
        nullable=False,
        index=True,
    )

    @property
    def entity_id(self) -> int:
        return self.asset_id

    def __repr__(self) -> str:
        return f"<AssetEvent {self.type.value} asset={self.asset_id}>"


class FingerprintEvent(EntityEventMixin, Base):
    __tablename__ = "fingerprint_events"
    __table_args__ = (
        Index("ix_fingerprint_events_enrollment_created", "enrollment_id", "created_at"),
    )

    enrollment_id: Mapped[int] = mapped_column(
        ForeignKey("fingerprint_enrollments.id"), nullable=False, index=True
    )
    type: Mapped[FingerprintEventType] = mapped_column(
        SAEnum(
            FingerprintEventType,
            name="fingerprint_event_type_enum",
            create_constraint=True,
        ),
        nullable=False,
        index=True,
    )

    @property
    def entity_id(self) -> int:
        return self.enrollment_id

    def __repr__(self) -> str:
        return f"<FingerprintEvent {self.type.value} enrollment={self.enrollment_id}>"


for _model in (AssetEvent, FingerprintEvent):
    event.listen(_model, "before_update", reject_mutation)
    event.listen(_model, "before_delete", reject_mutation)
