"""
Sequence service: collision-free monotonic counters.

Every human-readable identifier (EMP000123, FP-2025-00007)
comes from here. The increment is a single
UPDATE ... SET seq = seq + 1 ... RETURNING seq statement, so
the database row lock serializes concurrent callers and no
two of them can observe the same value.

Document numbers are never derived by reading the latest
record and adding one: two concurrent creators would read
the same record and mint the same number.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from itam.errors import StorageFailure, ValidationError
from itam.models.sequence_counter import SequenceCounter

logger = logging.getLogger(__name__)


class SequenceService:
    """
    Named-series counter backed by the sequence_counters table.

    Like the other services, this one never commits. The value
    is consumed once the caller commits; if the caller rolls
    back, the increment is rolled back with it. A value that
    was committed is never handed out again, even when the
    client that triggered it timed out.
    """

    def __init__(self, db: Session):
        self.db = db

    def next_value(self, series_key: str) -> int:
        """
        Atomically increment and return the named counter.

        A missing counter is created at 0 first, so the first
        call for a series returns 1.
        """
        if not series_key or not series_key.strip():
            raise ValidationError("series key must not be empty")

        try:
            value = self._increment(series_key)
            if value is None:
                self._create(series_key)
                value = self._increment(series_key)
        except SQLAlchemyError as e:
            logger.error("Sequence increment failed for %s: %s", series_key, e)
            raise StorageFailure(
                f"Could not increment sequence '{series_key}'"
            ) from e

        if value is None:
            raise StorageFailure(f"Sequence '{series_key}' could not be created")
        return value

    def current_value(self, series_key: str) -> int:
        """Last value handed out for a series, 0 if it was never used."""
        seq = self.db.execute(
            select(SequenceCounter.seq).where(SequenceCounter.key == series_key)
        ).scalar_one_or_none()
        return seq or 0

    def _increment(self, series_key: str) -> int | None:
        return self.db.execute(
            update(SequenceCounter)
            .where(SequenceCounter.key == series_key)
            .values(seq=SequenceCounter.seq + 1)
            .returning(SequenceCounter.seq)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()

    def _create(self, series_key: str) -> None:
        # The savepoint keeps a lost creation race from poisoning
        # the caller's transaction.
        try:
            with self.db.begin_nested():
                self.db.add(SequenceCounter(key=series_key, seq=0))
        except IntegrityError:
            logger.debug("Sequence %s created concurrently", series_key)
