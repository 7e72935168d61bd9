from datetime import datetime, timedelta

import pytest

from catalog import DEFAULT_SEED, Catalog
from item import LibraryItem
from library import Library


class FakeClock:
    """Mutable stand-in for datetime.now so overdue math is deterministic."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.current += timedelta(days=days, hours=hours)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 1, 9, 30))

@pytest.fixture
def desk(clock):
    # Fresh desk with the demo items for every test
    return Library(Catalog.from_seed(DEFAULT_SEED), clock=clock)

@pytest.fixture
def single_book_desk(clock):
    catalog = Catalog([LibraryItem.book(1, "Clean Code", "Robert C. Martin", 464)])
    return Library(catalog, clock=clock)
