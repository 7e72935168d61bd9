import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from catalog import DEFAULT_SEED, Catalog, load_seed_file
from errors import AlreadyAvailableError, InvalidLoanError, ItemNotAvailableError, LibraryError
from fines import FineLedger, FineRecord
from item import ItemKind, LibraryItem

logger = logging.getLogger(__name__)

FINE_RATE_PER_DAY = 10.0

Clock = Callable[[], datetime]
T = TypeVar("T")


def overdue_days(due_date: datetime, now: datetime) -> int:
    """Whole days elapsed strictly after ``due_date``; never negative."""
    if now <= due_date:
        return 0
    return (now - due_date).days


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a desk operation: either a value or a recoverable error."""
    value: Optional[T] = None
    error: Optional[LibraryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[T]:
        if self.error is not None:
            raise self.error
        return self.value


class LendingEngine:
    """Borrow and return transitions plus fine computation."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or datetime.now

    def now(self) -> datetime:
        return self.clock()

    def borrow(self, item: LibraryItem, borrower: str, days: int) -> None:
        if not item.available:
            raise ItemNotAvailableError(item.id)

        # Non-positive loan lengths become a loan due immediately
        loan_days = max(int(days), 0)
        try:
            due_date = self.now() + timedelta(days=loan_days)
        except OverflowError:
            raise InvalidLoanError(item.id, days) from None

        item.available = False
        item.borrower = borrower
        item.due_date = due_date
        logger.info("Borrowed item: %s by %s until %s", item.describe(), borrower, due_date.isoformat())

    def return_item(self, item: LibraryItem) -> Optional[FineRecord]:
        if item.available:
            raise AlreadyAvailableError(item.id)

        now = self.now()
        borrower = item.borrower or ""
        fine: Optional[FineRecord] = None

        days = overdue_days(item.due_date, now) if item.due_date else 0
        if days > 0:
            fine = FineRecord(
                item_id=item.id,
                borrower=borrower,
                days_overdue=days,
                amount=days * FINE_RATE_PER_DAY,
                timestamp=now,
            )
            logger.info("Fine applied: %s", fine)

        item.available = True
        item.borrower = None
        item.due_date = None
        logger.info("Returned item %d by %s at %s", item.id, borrower, now.isoformat())
        return fine


class Library:
    """Circulation desk context: the catalog, its fine ledger and the lending engine.

    Built once by the process entry point and shared by every caller. All
    operations are serialised by one re-entrant lock, so the HTTP service can
    hand the same instance to concurrent request handlers.
    """

    def __init__(self, catalog: Catalog, ledger: Optional[FineLedger] = None,
                 clock: Optional[Clock] = None) -> None:
        self.catalog = catalog
        self.ledger = ledger if ledger is not None else FineLedger()
        self.engine = LendingEngine(clock)
        self._lock = threading.RLock()

    # ------------------------- Core operations ------------------------- #
    def lookup(self, item_id: int) -> Outcome[LibraryItem]:
        with self._lock:
            try:
                return Outcome(self.catalog.lookup(item_id))
            except LibraryError as e:
                return Outcome(error=e)

    def borrow(self, item_id: int, borrower: str, days: int) -> Outcome[LibraryItem]:
        with self._lock:
            try:
                item = self.catalog.lookup(item_id)
                self.engine.borrow(item, borrower, days)
                return Outcome(item)
            except LibraryError as e:
                logger.warning("Borrow rejected for item %s: %s", item_id, e)
                return Outcome(error=e)

    def return_item(self, item_id: int) -> Outcome[FineRecord]:
        with self._lock:
            try:
                item = self.catalog.lookup(item_id)
                fine = self.engine.return_item(item)
            except AlreadyAvailableError as e:
                logger.info("%s", e)
                return Outcome(error=e)
            except LibraryError as e:
                logger.warning("Return rejected for item %s: %s", item_id, e)
                return Outcome(error=e)
            if fine is not None:
                self.ledger.record(fine)
            return Outcome(fine)

    def play(self, item_id: int) -> Outcome[str]:
        with self._lock:
            try:
                message = self.catalog.lookup(item_id).play()
            except LibraryError as e:
                logger.warning("Play rejected for item %s: %s", item_id, e)
                return Outcome(error=e)
            logger.info(message)
            return Outcome(message)

    def archive(self, item_id: int) -> Outcome[str]:
        with self._lock:
            try:
                message = self.catalog.lookup(item_id).archive(self.engine.now())
            except LibraryError as e:
                logger.warning("Archive rejected for item %s: %s", item_id, e)
                return Outcome(error=e)
            logger.info(message)
            return Outcome(message)

    def search(self, keyword: str) -> Iterator[LibraryItem]:
        with self._lock:
            matches = list(self.catalog.search(keyword))
        return iter(matches)

    def list_fines(self, borrower: Optional[str] = None) -> Tuple[FineRecord, ...]:
        with self._lock:
            if borrower is not None:
                return tuple(self.ledger.for_borrower(borrower))
            return self.ledger.list()

    def list_items(self) -> List[LibraryItem]:
        with self._lock:
            return list(self.catalog.items())

    def get_statistics(self) -> Dict[str, Any]:
        """Get desk statistics."""
        with self._lock:
            items = list(self.catalog.items())
            by_type = {kind.value: 0 for kind in ItemKind}
            for item in items:
                by_type[item.kind.value] += 1
            available = sum(1 for item in items if item.available)
            return {
                "total_items": len(items),
                "available_items": available,
                "borrowed_items": len(items) - available,
                "by_type": by_type,
                "archived_magazines": sum(1 for item in items if item.kind is ItemKind.EMAGAZINE and item.archived),
                "total_fines": len(self.ledger),
                "fines_amount": self.ledger.total(),
            }


def create_library(seed_file: Optional[str] = None, clock: Optional[Clock] = None) -> Library:
    """Build a desk from ``seed_file`` (JSON) or the built-in demo items."""
    records = load_seed_file(seed_file) if seed_file else DEFAULT_SEED
    return Library(Catalog.from_seed(records), clock=clock)
