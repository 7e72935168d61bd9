from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Tuple


@dataclass(frozen=True)
class FineRecord:
    """Fine produced when an overdue item is returned.

    Attributes:
        item_id: id of the returned item.
        borrower: borrower name captured at the moment of return.
        days_overdue: whole days past the due date (always > 0 for a recorded fine).
        amount: ``days_overdue`` times the fixed daily rate.
        timestamp: instant of the return.
    """
    item_id: int
    borrower: str
    days_overdue: int
    amount: float
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "borrower": self.borrower,
            "days_overdue": self.days_overdue,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return (
            f"FineRecord[itemId={self.item_id}, borrower='{self.borrower}', "
            f"daysOverdue={self.days_overdue}, amount={self.amount}, "
            f"at={self.timestamp.isoformat(timespec='seconds')}]"
        )


class FineLedger:
    """Append-only, chronologically ordered record of fines."""

    def __init__(self) -> None:
        self._fines: List[FineRecord] = []

    def record(self, fine: FineRecord) -> None:
        self._fines.append(fine)

    def list(self) -> Tuple[FineRecord, ...]:
        return tuple(self._fines)

    def total(self) -> float:
        return sum(f.amount for f in self._fines)

    def for_borrower(self, name: str) -> List[FineRecord]:
        return [f for f in self._fines if f.borrower == name]

    def __len__(self) -> int:
        return len(self._fines)

    def __iter__(self) -> Iterator[FineRecord]:
        return iter(tuple(self._fines))
