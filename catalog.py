from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List

from errors import ItemNotFoundError, SeedError
from item import ItemKind, LibraryItem

logger = logging.getLogger(__name__)


# Demo items the desk opens with when no seed file is configured
DEFAULT_SEED: List[Dict[str, Any]] = [
    {"id": 1, "type": "Book", "title": "Clean Code", "author": "Robert C. Martin", "pages": 464},
    {"id": 2, "type": "AudioBook", "title": "Effective Java - Audio", "author": "Joshua Bloch", "hours": 11.5},
    {"id": 3, "type": "EMagazine", "title": "Nature Monthly", "author": "Editorial Team", "issue": "2025"},
    {"id": 4, "type": "Book", "title": "Half Girlfriend", "author": "Chetan Bhagat", "pages": 260},
    {"id": 5, "type": "Book", "title": "Wings of Fire", "author": "A.P.J. Abdul Kalam", "pages": 180},
    {"id": 6, "type": "Book", "title": "Malgudi Days", "author": "R.K. Narayan", "pages": 245},
    {"id": 7, "type": "AudioBook", "title": "Panchatantra Ki Kahaniyaan - Audio", "author": "Vishnu Sharma", "hours": 5.75},
    {"id": 8, "type": "EMagazine", "title": "Champak Monthly", "author": "Delhi Press", "issue": "202509"},
    {"id": 9, "type": "EMagazine", "title": "India Today", "author": "Editorial Team", "issue": "202509"},
]


def _item_from_seed(record: Dict[str, Any]) -> LibraryItem:
    try:
        kind = ItemKind(record["type"])
    except (KeyError, ValueError) as e:
        raise SeedError(f"Unknown item type in seed record: {record.get('type')!r}") from e

    try:
        if kind is ItemKind.BOOK:
            return LibraryItem.book(record["id"], record["title"], record["author"], record["pages"])
        if kind is ItemKind.AUDIOBOOK:
            return LibraryItem.audiobook(record["id"], record["title"], record["author"], record["hours"])
        return LibraryItem.emagazine(record["id"], record["title"], record["author"], record["issue"])
    except KeyError as e:
        raise SeedError(f"Seed record is missing field {e.args[0]!r}: {record!r}") from e
    except (TypeError, ValueError) as e:
        raise SeedError(f"Invalid seed record {record!r}: {e}") from e


def load_seed_file(path: str | Path) -> List[Dict[str, Any]]:
    """Read a JSON list of seed records from disk."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SeedError(f"Seed file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SeedError(f"Seed file {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise SeedError(f"Seed file {path} must contain a JSON list of items.")
    return data


class Catalog:
    """Owns every library item, keyed by id."""

    def __init__(self, items: Iterable[LibraryItem] = ()) -> None:
        self._items: Dict[int, LibraryItem] = {}
        for item in items:
            if item.id in self._items:
                raise SeedError(f"Duplicate item id {item.id} in catalog seed.", item.id)
            self._items[item.id] = item

    @classmethod
    def from_seed(cls, records: Iterable[Dict[str, Any]]) -> "Catalog":
        catalog = cls(_item_from_seed(r) for r in records)
        logger.info("Catalog seeded with %d items", len(catalog))
        return catalog

    def lookup(self, item_id: int) -> LibraryItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def items(self) -> Iterator[LibraryItem]:
        for item_id in sorted(self._items):
            yield self._items[item_id]

    def search(self, keyword: str) -> Iterator[LibraryItem]:
        """Yield items whose type name or title contains ``keyword``, ignoring case."""
        key = (keyword or "").lower()
        for item in self.items():
            if key in item.kind.value.lower() or key in item.title.lower():
                yield item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items
