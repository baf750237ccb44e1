"""
Tests for the SequenceService.

The key property: for N concurrent callers on one series the
returned values are exactly start+1 .. start+N.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from itam.errors import StorageFailure, ValidationError
from itam.services.sequence_service import SequenceService


class TestNextValue:

    def test_first_value_is_one(self, db_session):
        service = SequenceService(db_session)
        assert service.next_value("employees") == 1
        db_session.commit()
        assert service.current_value("employees") == 1

    def test_values_increase_by_one(self, db_session):
        service = SequenceService(db_session)
        values = [service.next_value("employees") for _ in range(5)]
        db_session.commit()
        assert values == [1, 2, 3, 4, 5]

    def test_series_are_independent(self, db_session):
        service = SequenceService(db_session)
        service.next_value("employees")
        service.next_value("employees")
        assert service.next_value("fp-docs-2025") == 1
        assert service.next_value("fp-docs-2026") == 1
        assert service.next_value("employees") == 3

    def test_unknown_series_reads_as_zero(self, db_session):
        assert SequenceService(db_session).current_value("never-used") == 0

    def test_empty_key_rejected(self, db_session):
        with pytest.raises(ValidationError):
            SequenceService(db_session).next_value("  ")


class TestTransactionBoundary:

    def test_rolled_back_increment_is_not_consumed(self, db_session):
        service = SequenceService(db_session)
        service.next_value("employees")
        db_session.commit()

        assert service.next_value("employees") == 2
        db_session.rollback()

        assert service.next_value("employees") == 2

    def test_storage_error_becomes_storage_failure(self):
        db = MagicMock()
        db.execute.side_effect = OperationalError(
            "UPDATE sequence_counters", {}, Exception("database is down")
        )

        with pytest.raises(StorageFailure, match="employees"):
            SequenceService(db).next_value("employees")


class TestConcurrency:

    def _take(self, session_factory, key):
        db = session_factory()
        try:
            value = SequenceService(db).next_value(key)
            db.commit()
            return value
        finally:
            db.close()

    def test_concurrent_callers_get_distinct_gapless_values(self, session_factory):
        start = self._take(session_factory, "employees")
        n = 20

        with ThreadPoolExecutor(max_workers=8) as pool:
            values = list(pool.map(
                lambda _: self._take(session_factory, "employees"), range(n)
            ))

        assert len(set(values)) == n
        assert set(values) == set(range(start + 1, start + n + 1))

    def test_concurrent_callers_on_different_series(self, session_factory):
        keys = ["fp-docs-2025", "fp-docs-2026"] * 5
        self._take(session_factory, "fp-docs-2025")
        self._take(session_factory, "fp-docs-2026")

        with ThreadPoolExecutor(max_workers=4) as pool:
            values = list(pool.map(lambda k: (k, self._take(session_factory, k)), keys))

        for key in ("fp-docs-2025", "fp-docs-2026"):
            taken = sorted(v for k, v in values if k == key)
            assert taken == [2, 3, 4, 5, 6]
