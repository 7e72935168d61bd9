import json
import pytest
from datetime import datetime

from catalog import DEFAULT_SEED, Catalog, load_seed_file
from errors import ItemNotFoundError, SeedError
from fines import FineLedger, FineRecord
from item import ItemKind, LibraryItem


def test_default_seed_builds_nine_items():
    catalog = Catalog.from_seed(DEFAULT_SEED)
    assert len(catalog) == 9
    assert [i.id for i in catalog.items()] == list(range(1, 10))
    assert catalog.lookup(2).kind is ItemKind.AUDIOBOOK
    assert catalog.lookup(9).issue == "202509"


def test_lookup_missing_id_raises():
    catalog = Catalog.from_seed(DEFAULT_SEED)
    with pytest.raises(ItemNotFoundError) as exc:
        catalog.lookup(42)
    assert exc.value.item_id == 42
    assert 42 not in catalog


def test_items_iterate_in_id_order():
    catalog = Catalog([
        LibraryItem.book(5, "E", "A", 1),
        LibraryItem.book(2, "B", "A", 1),
        LibraryItem.book(9, "I", "A", 1),
    ])
    assert [i.id for i in catalog.items()] == [2, 5, 9]


def test_search_is_lazy():
    catalog = Catalog.from_seed(DEFAULT_SEED)
    matches = catalog.search("audio")
    assert not isinstance(matches, list)
    assert next(matches).id == 2


def test_empty_keyword_matches_everything():
    catalog = Catalog.from_seed(DEFAULT_SEED)
    assert len(list(catalog.search(""))) == 9


def test_duplicate_ids_are_rejected():
    with pytest.raises(SeedError):
        Catalog.from_seed([
            {"id": 1, "type": "Book", "title": "A", "author": "X", "pages": 1},
            {"id": 1, "type": "AudioBook", "title": "B", "author": "Y", "hours": 1.0},
        ])


@pytest.mark.parametrize(
    "record",
    [
        {"id": 1, "type": "Scroll", "title": "A", "author": "X"},
        {"id": 1, "type": "Book", "title": "A", "author": "X"},
        {"id": -1, "type": "Book", "title": "A", "author": "X", "pages": 3},
        {"type": "EMagazine", "title": "A", "author": "X", "issue": "1"},
    ],
)
def test_malformed_seed_records(record):
    with pytest.raises(SeedError):
        Catalog.from_seed([record])


def test_load_seed_file(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps(DEFAULT_SEED[:2]), encoding="utf-8")
    assert load_seed_file(path) == DEFAULT_SEED[:2]


def test_load_seed_file_errors(tmp_path):
    with pytest.raises(SeedError):
        load_seed_file(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SeedError):
        load_seed_file(broken)

    not_a_list = tmp_path / "object.json"
    not_a_list.write_text('{"id": 1}', encoding="utf-8")
    with pytest.raises(SeedError):
        load_seed_file(not_a_list)


def test_fine_ledger_is_append_only_and_ordered():
    ledger = FineLedger()
    first = FineRecord(1, "Alice", 2, 20.0, datetime(2025, 1, 8))
    second = FineRecord(4, "Bob", 1, 10.0, datetime(2025, 1, 9))
    third = FineRecord(6, "Alice", 3, 30.0, datetime(2025, 1, 10))
    for fine in (first, second, third):
        ledger.record(fine)

    snapshot = ledger.list()
    assert snapshot == (first, second, third)
    assert isinstance(snapshot, tuple)
    assert ledger.total() == 60.0
    assert ledger.for_borrower("Alice") == [first, third]
    assert len(ledger) == 3


def test_fine_record_is_immutable():
    fine = FineRecord(1, "Alice", 2, 20.0, datetime(2025, 1, 8))
    with pytest.raises(AttributeError):
        fine.amount = 0.0
    assert fine.to_dict() == {
        "item_id": 1,
        "borrower": "Alice",
        "days_overdue": 2,
        "amount": 20.0,
        "timestamp": "2025-01-08T00:00:00",
    }
