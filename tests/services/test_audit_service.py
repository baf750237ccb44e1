"""
Tests for the audit trail and entity timelines.

Key properties:
- stored snapshots never contain a denylisted key, at any depth
- a failed audit write never undoes the committed mutation
- entries cannot be updated or deleted
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from itam.errors import ImmutableRecordError
from itam.models.audit_log import AuditLog
from itam.models.employee import Employee
from itam.models.enums import AssetEventType, AuditStatus
from itam.schemas.audit import AuditInput, AuditQuery, EventInput
from itam.schemas.entities import AssetCreate
from itam.services.asset_service import AssetService
from itam.services.audit_service import (
    BASE_SENSITIVE_KEYS,
    AuditService,
    asset_events,
    fingerprint_events,
    sanitize,
    total_pages,
)


def _entry(**overrides) -> AuditInput:
    fields = dict(
        actor_user_id="1",
        actor_username="admin",
        action="ASSET_CREATE",
        module="assets",
        status=AuditStatus.SUCCESS,
        entity_type="Asset",
        entity_id="1",
    )
    fields.update(overrides)
    return AuditInput(**fields)


def _audit_count(db) -> int:
    return db.execute(select(func.count()).select_from(AuditLog)).scalar_one()


class TestSanitize:

    def test_strips_nested_keys(self):
        value = {"user": {"name": "a", "password": "x"}, "list": [{"passwordHash": "y"}]}
        assert sanitize(value) == {"user": {"name": "a"}, "list": [{}]}

    def test_leaves_clean_values_untouched(self):
        value = {"a": 1, "b": [1, "two", None], "c": {"d": True}}
        assert sanitize(value) == value

    @pytest.mark.parametrize("value", [None, 3, "password", [1, 2]])
    def test_scalars_and_none_pass_through(self, value):
        assert sanitize(value) == value

    def test_does_not_modify_input(self):
        value = {"password": "x", "keep": 1}
        sanitize(value)
        assert value == {"password": "x", "keep": 1}

    def test_custom_denylist(self):
        value = {"token": "t", "password": "p", "name": "n"}
        assert sanitize(value, frozenset({"token"})) == {"password": "p", "name": "n"}

    def test_base_keys_always_present(self):
        assert {"password", "passwordHash", "password_hash"} <= BASE_SENSITIVE_KEYS


class TestAuditRecord:

    def test_stores_sanitized_snapshots(self, db_session):
        log = AuditService(db_session).record(_entry(
            before={"name": "old", "password": "secret"},
            after={"name": "new", "meta": [{"password_hash": "h", "ok": 1}]},
        ))

        stored = db_session.get(AuditLog, log.id)
        assert stored.before == {"name": "old"}
        assert stored.after == {"name": "new", "meta": [{"ok": 1}]}
        assert stored.status == AuditStatus.SUCCESS
        assert stored.created_at is not None

    def test_failed_write_keeps_committed_mutation(
        self, db_session, monkeypatch, caplog
    ):
        employee = Employee(employee_id="EMP000001", full_name="Dana Smith")
        db_session.add(employee)
        db_session.commit()

        def broken_commit():
            raise OperationalError("INSERT INTO audit_log", {}, Exception("disk full"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with caplog.at_level(logging.ERROR, logger="itam.services.audit_service"):
            result = AuditService(db_session).record(_entry(
                action="EMPLOYEE_CREATE",
                after={"full_name": "Dana Smith", "salary_note": "private"},
            ))
        monkeypatch.undo()

        assert result is None
        assert "Audit write failed" in caplog.text
        assert "private" not in caplog.text
        assert db_session.execute(
            select(Employee).where(Employee.employee_id == "EMP000001")
        ).scalar_one().full_name == "Dana Smith"
        assert _audit_count(db_session) == 0


class TestImmutability:

    def test_update_is_rejected(self, db_session):
        log = AuditService(db_session).record(_entry(summary="original"))
        log.summary = "rewritten"
        with pytest.raises(ImmutableRecordError):
            db_session.flush()
        db_session.rollback()

        assert db_session.get(AuditLog, log.id).summary == "original"

    def test_delete_is_rejected(self, db_session):
        log = AuditService(db_session).record(_entry())
        db_session.delete(log)
        with pytest.raises(ImmutableRecordError):
            db_session.flush()
        db_session.rollback()

        assert _audit_count(db_session) == 1


class TestAuditList:

    def _seed(self, db):
        service = AuditService(db)
        service.record(_entry(action="ASSET_CREATE", module="assets", entity_id="1"))
        service.record(_entry(action="ASSET_ASSIGN", module="assets", entity_id="1"))
        service.record(_entry(action="EMPLOYEE_CREATE", module="employees",
                              actor_username="staff", entity_id="9"))
        service.record(_entry(action="ASSET_ASSIGN", module="assets",
                              status=AuditStatus.FAIL, entity_id="2"))
        return service

    def test_newest_first(self, db_session):
        service = self._seed(db_session)
        items, total = service.list(AuditQuery())

        assert total == 4
        assert [i.id for i in items] == sorted((i.id for i in items), reverse=True)

    def test_filters(self, db_session):
        service = self._seed(db_session)

        assert service.list(AuditQuery(module="assets"))[1] == 3
        assert service.list(AuditQuery(action="ASSET_ASSIGN"))[1] == 2
        assert service.list(AuditQuery(actor="staff"))[1] == 1
        assert service.list(AuditQuery(entity_id="1"))[1] == 2
        assert service.list(AuditQuery(status=AuditStatus.FAIL))[1] == 1
        assert service.list(AuditQuery(module="assets", status=AuditStatus.SUCCESS))[1] == 2

    def test_date_range(self, db_session):
        service = self._seed(db_session)
        now = datetime.utcnow()

        assert service.list(AuditQuery(date_from=now - timedelta(hours=1)))[1] == 4
        assert service.list(AuditQuery(date_from=now + timedelta(hours=1)))[1] == 0
        assert service.list(AuditQuery(date_to=now - timedelta(hours=1)))[1] == 0

    def test_pagination(self, db_session):
        service = self._seed(db_session)

        first, total = service.list(AuditQuery(page=1, limit=3))
        second, _ = service.list(AuditQuery(page=2, limit=3))

        assert total == 4
        assert len(first) == 3
        assert len(second) == 1
        assert not {i.id for i in first} & {i.id for i in second}

    def test_reversed_range_rejected(self):
        now = datetime.utcnow()
        with pytest.raises(ValueError):
            AuditQuery(date_from=now, date_to=now - timedelta(days=1))

    def test_aware_bounds_become_naive_utc(self):
        query = AuditQuery(
            date_from=datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2))),
            date_to=datetime(2025, 2, 1),
        )
        assert query.date_from == datetime(2025, 1, 1, 0, 0)
        assert query.date_from.tzinfo is None

    @pytest.mark.parametrize("total, limit, expected", [(0, 25, 0), (25, 25, 1), (26, 25, 2)])
    def test_total_pages(self, total, limit, expected):
        assert total_pages(total, limit) == expected


class TestEntityEvents:

    def _asset(self, db):
        asset = AssetService(db).create_asset(
            AssetCreate(asset_tag="LT-001", name="Laptop", category="laptop")
        )
        db.commit()
        return asset

    def test_record_and_list(self, db_session):
        asset = self._asset(db_session)
        events = asset_events(db_session)

        events.record(EventInput(entity_id=asset.id, type="ASSIGN",
                                 after={"assignee": "Dana", "password": "x"}))
        events.record(EventInput(entity_id=asset.id, type="UNASSIGN", note="returned"))

        items, total = events.list_for(asset.id)
        assert total == 2
        assert items[0].type == AssetEventType.UNASSIGN
        assert items[1].after == {"assignee": "Dana"}
        assert items[1].entity_id == asset.id

    def test_timelines_are_scoped_to_entity(self, db_session):
        asset = self._asset(db_session)
        asset_events(db_session).record(EventInput(entity_id=asset.id, type="ASSIGN"))

        assert asset_events(db_session).list_for(asset.id + 1)[1] == 0

    def test_unknown_type_is_logged_not_raised(self, db_session, caplog):
        asset = self._asset(db_session)

        with caplog.at_level(logging.ERROR, logger="itam.services.audit_service"):
            result = asset_events(db_session).record(
                EventInput(entity_id=asset.id, type="PRINT")
            )

        assert result is None
        assert "rejected" in caplog.text
        assert asset_events(db_session).list_for(asset.id)[1] == 0

    def test_fingerprint_types_differ_from_asset_types(self, db_session):
        assert fingerprint_events(db_session).record(
            EventInput(entity_id=1, type="ASSIGN")
        ) is None

    def test_event_update_is_rejected(self, db_session):
        asset = self._asset(db_session)
        event = asset_events(db_session).record(
            EventInput(entity_id=asset.id, type="ASSIGN", note="first")
        )
        event.note = "changed"
        with pytest.raises(ImmutableRecordError):
            db_session.flush()
        db_session.rollback()
