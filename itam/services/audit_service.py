"""
Audit service: the system-wide trail and per-entity timelines.

Every state-changing handler follows the same order:

1. mutate the entity and commit
2. record the audit entry (and the entity event, if the entity
   has a timeline)

Writes here are best-effort relative to the mutation. The
mutation is authoritative once committed; a failed audit write
is logged and rolled back on its own but never undoes it.

Entries are append-only. Nothing in this module updates or
deletes them, and the models reject it at flush.
"""

import logging
import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Generic, TypeVar

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from itam.config import get_settings
from itam.models.audit_log import AuditLog
from itam.models.entity_event import AssetEvent, FingerprintEvent
from itam.models.enums import AssetEventType, FingerprintEventType
from itam.schemas.audit import AuditInput, AuditQuery, EventInput

logger = logging.getLogger(__name__)

# Always stripped, whatever the configuration adds on top.
BASE_SENSITIVE_KEYS = frozenset({"password", "passwordHash", "password_hash"})


def sensitive_keys() -> frozenset[str]:
    return BASE_SENSITIVE_KEYS | get_settings().AUDIT_SENSITIVE_KEYS


def sanitize(value: Any, denylist: frozenset[str] | None = None) -> Any:
    """
    Return a copy of a JSON-like value without denylisted keys.

    Walks dicts and lists at every depth. Everything else,
    None included, is returned unchanged.
    """
    if denylist is None:
        denylist = sensitive_keys()
    if isinstance(value, Mapping):
        return {
            k: sanitize(v, denylist)
            for k, v in value.items()
            if k not in denylist
        }
    if isinstance(value, (list, tuple)):
        return [sanitize(v, denylist) for v in value]
    return value


def paginate(db: Session, stmt, page: int, limit: int) -> tuple[list, int]:
    """Run stmt for one page and count the unpaged result."""
    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    items = db.execute(
        stmt.offset((page - 1) * limit).limit(limit)
    ).scalars().all()
    return list(items), total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class AuditService:
    """
    Writes and queries the audit_log table.

    record() commits its own entry, so it must only be called
    once the business mutation has been committed.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(self, entry: AuditInput) -> AuditLog | None:
        """
        Append one sanitized audit entry.

        Returns the stored entry, or None when the write failed.
        A failure is logged with the action and entity only,
        never with the snapshots.
        """
        denylist = sensitive_keys()
        log = AuditLog(
            actor_user_id=entry.actor_user_id,
            actor_username=entry.actor_username,
            action=entry.action,
            module=entry.module,
            status=entry.status,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            summary=entry.summary,
            before=sanitize(entry.before, denylist),
            after=sanitize(entry.after, denylist),
            ip=entry.ip,
            user_agent=entry.user_agent,
        )
        try:
            self.db.add(log)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Audit write failed: action=%s module=%s entity=%s:%s",
                entry.action, entry.module, entry.entity_type, entry.entity_id,
            )
            return None
        return log

    def get(self, audit_id: int) -> AuditLog | None:
        return self.db.get(AuditLog, audit_id)

    def list(self, query: AuditQuery) -> tuple[list[AuditLog], int]:
        """Return one page of entries, newest first, and the total count."""
        stmt = select(AuditLog)
        if query.module:
            stmt = stmt.where(AuditLog.module == query.module)
        if query.action:
            stmt = stmt.where(AuditLog.action == query.action)
        if query.actor:
            stmt = stmt.where(AuditLog.actor_username == query.actor)
        if query.entity_id:
            stmt = stmt.where(AuditLog.entity_id == query.entity_id)
        if query.status:
            stmt = stmt.where(AuditLog.status == query.status)
        if query.date_from:
            stmt = stmt.where(AuditLog.created_at >= query.date_from)
        if query.date_to:
            stmt = stmt.where(AuditLog.created_at <= query.date_to)

        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        return paginate(self.db, stmt, query.page, query.limit)


EventModel = TypeVar("EventModel", AssetEvent, FingerprintEvent)


class EntityEventService(Generic[EventModel]):
    """
    Same write path as AuditService, scoped to one entity timeline.

    model is the timeline table, entity_field the column holding
    the entity's id and event_types the closed set of types the
    timeline accepts.
    """

    def __init__(
        self,
        db: Session,
        model: type[EventModel],
        entity_field: str,
        event_types: type[Enum],
    ):
        self.db = db
        self.model = model
        self.entity_field = entity_field
        self.event_types = event_types

    def record(self, entry: EventInput) -> EventModel | None:
        """
        Append one sanitized event.

        Returns None when the write failed or the type does not
        belong to this timeline. Never raises: the mutation it
        describes is already committed.
        """
        try:
            event_type = self.event_types(entry.type)
        except ValueError:
            logger.error(
                "%s rejected: '%s' is not a valid type, entity=%s",
                self.model.__name__, entry.type, entry.entity_id,
            )
            return None

        denylist = sensitive_keys()
        event = self.model(
            type=event_type,
            before=sanitize(entry.before, denylist),
            after=sanitize(entry.after, denylist),
            note=entry.note,
            actor_user_id=entry.actor_user_id,
            actor_username=entry.actor_username,
            **{self.entity_field: entry.entity_id},
        )
        try:
            self.db.add(event)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "%s write failed: type=%s entity=%s",
                self.model.__name__, event_type.value, entry.entity_id,
            )
            return None
        return event

    def list_for(
        self, entity_id: int, page: int = 1, limit: int = 25
    ) -> tuple[list[EventModel], int]:
        column = getattr(self.model, self.entity_field)
        stmt = (
            select(self.model)
            .where(column == entity_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return paginate(self.db, stmt, page, limit)


def asset_events(db: Session) -> EntityEventService[AssetEvent]:
    return EntityEventService(db, AssetEvent, "asset_id", AssetEventType)


def fingerprint_events(db: Session) -> EntityEventService[FingerprintEvent]:
    return EntityEventService(
        db, FingerprintEvent, "enrollment_id", FingerprintEventType
    )
