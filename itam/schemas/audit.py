"""
Pydantic schemas for the audit log and entity timelines.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from itam.models.enums import AuditStatus


# --- Write-side inputs ---

class AuditInput(BaseModel):
    """One state-changing operation, as reported by a business handler."""
    actor_user_id: str | None = None
    actor_username: str | None = None
    action: str = Field(min_length=1, max_length=100)
    module: str = Field(min_length=1, max_length=100)
    status: AuditStatus
    entity_type: str | None = None
    entity_id: str | None = None
    summary: str | None = None
    before: Any = None
    after: Any = None
    ip: str | None = None
    user_agent: str | None = None


class EventInput(BaseModel):
    """One step in a single entity's timeline."""
    entity_id: int
    type: str
    before: Any = None
    after: Any = None
    note: str | None = None
    actor_user_id: str | None = None
    actor_username: str | None = None


# --- Read-side queries ---

class AuditQuery(BaseModel):
    module: str | None = None
    action: str | None = None
    actor: str | None = None
    entity_id: str | None = None
    status: AuditStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=25, ge=1, le=100)

    @field_validator("date_from", "date_to")
    @classmethod
    def as_naive_utc(cls, v: datetime | None) -> datetime | None:
        # created_at is stored as naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def range_must_be_ordered(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


# --- Responses ---

class AuditLogResponse(BaseModel):
    id: int
    actor_user_id: str | None
    actor_username: str | None
    action: str
    module: str
    status: AuditStatus
    entity_type: str | None
    entity_id: str | None
    summary: str | None
    ip: str | None
    user_agent: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogDetailResponse(AuditLogResponse):
    before: Any = None
    after: Any = None


class EntityEventResponse(BaseModel):
    id: int
    entity_id: int
    type: str
    before: Any = None
    after: Any = None
    note: str | None
    actor_user_id: str | None
    actor_username: str | None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("type", mode="before")
    @classmethod
    def type_as_value(cls, v):
        return getattr(v, "value", v)


class Page(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    items: list


class AuditPage(Page):
    items: list[AuditLogResponse]


class EntityEventPage(Page):
    items: list[EntityEventResponse]
