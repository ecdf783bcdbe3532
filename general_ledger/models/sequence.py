"""
Sequence counter model.

One row per document type (INV, PAY, JE, ...). The row is
locked while it is incremented, so two concurrent creates can
never receive the same human-readable number.
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from general_ledger.models.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(30), primary_key=True)
    current_value: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    def __repr__(self) -> str:
        return f"<SequenceCounter {self.name}={self.current_value}>"
