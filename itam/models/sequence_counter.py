"""
Sequence counter model.

One row per named series ("employees", "fp-docs-2025").
The seq column only ever moves forward; it is changed
exclusively through SequenceService.next_value().
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from itam.models.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<SequenceCounter {self.key}={self.seq}>"
