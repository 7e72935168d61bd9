from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from errors import WrongVariantError


class ItemKind(str, Enum):
    """Closed set of lendable item variants."""

    BOOK = "Book"
    AUDIOBOOK = "AudioBook"
    EMAGAZINE = "EMagazine"


class LibraryItem:
    """A single lendable catalog entry.

    The variant is carried by ``kind``; only the field belonging to that
    variant (``pages``, ``hours`` or ``issue``/``archived``) is meaningful.
    Lending state (``available``, ``borrower``, ``due_date``) is mutated by
    the lending engine, never directly by callers.
    """

    def __init__(self, item_id: int, kind: ItemKind, title: str, author: str,
                 pages: int | None = None, hours: float | None = None,
                 issue: str | None = None, archived: bool = False) -> None:
        if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id <= 0:
            raise ValueError(f"Item id must be a positive integer, got {item_id!r}.")
        self._id = item_id
        self._kind = ItemKind(kind)
        self._title = title.strip()
        self._author = author.strip()

        self.pages = pages
        self.hours = hours
        self.issue = issue
        self.archived = archived

        self.available: bool = True
        self.borrower: Optional[str] = None
        self.due_date: Optional[datetime] = None

    # ------------------------- Constructors ------------------------- #
    @classmethod
    def book(cls, item_id: int, title: str, author: str, pages: int) -> "LibraryItem":
        return cls(item_id, ItemKind.BOOK, title, author, pages=int(pages))

    @classmethod
    def audiobook(cls, item_id: int, title: str, author: str, hours: float) -> "LibraryItem":
        return cls(item_id, ItemKind.AUDIOBOOK, title, author, hours=float(hours))

    @classmethod
    def emagazine(cls, item_id: int, title: str, author: str, issue: str) -> "LibraryItem":
        return cls(item_id, ItemKind.EMAGAZINE, title, author, issue=str(issue))

    # ------------------------- Read-only identity ------------------------- #
    @property
    def id(self) -> int:
        return self._id

    @property
    def kind(self) -> ItemKind:
        return self._kind

    @property
    def title(self) -> str:
        return self._title

    @property
    def author(self) -> str:
        return self._author

    def is_available(self) -> bool:
        return self.available

    # ------------------------- Variant capabilities ------------------------- #
    def _require(self, kind: ItemKind) -> None:
        if self._kind is not kind:
            raise WrongVariantError(self._id, kind.value, self._kind.value)

    def play(self) -> str:
        """Return the playback notification. Lending state is untouched."""
        self._require(ItemKind.AUDIOBOOK)
        return f"Playing audiobook '{self.title}' by {self.author} (approx. {self.hours}h)"

    def archive(self, now: datetime) -> str:
        """Mark an e-magazine archived. Re-archiving is a legal no-op."""
        self._require(ItemKind.EMAGAZINE)
        self.archived = True
        return f"Archived e-magazine '{self.title}' issue #{self.issue} at {now.isoformat(timespec='seconds')}"

    # ------------------------- Display ------------------------- #
    def _variant_suffix(self) -> str:
        if self._kind is ItemKind.BOOK:
            return f"(pages={self.pages})"
        if self._kind is ItemKind.AUDIOBOOK:
            return f"(hours={self.hours})"
        return f"(issue={self.issue}, archived={str(self.archived).lower()})"

    def status(self) -> str:
        if self.available:
            return "Available"
        due = self.due_date.isoformat(timespec="minutes") if self.due_date else "?"
        return f"Borrowed by {self.borrower} until {due}"

    def describe(self) -> str:
        return (
            f"{self._kind.value}[id={self._id}, title='{self.title}', author='{self.author}', "
            f"status={self.status()}] {self._variant_suffix()}"
        )

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return self.describe()

    def __repr__(self) -> str:
        return f"LibraryItem(id={self._id!r}, kind={self._kind.value!r}, title={self.title!r})"

    # ------------------------- Serialisation ------------------------- #
    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self._id,
            "type": self._kind.value,
            "title": self.title,
            "author": self.author,
            "available": self.available,
            "borrower": self.borrower,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }
        if self._kind is ItemKind.BOOK:
            data["pages"] = self.pages
        elif self._kind is ItemKind.AUDIOBOOK:
            data["hours"] = self.hours
        else:
            data["issue"] = self.issue
            data["archived"] = self.archived
        return data

    @staticmethod
    def from_dict(data: dict) -> "LibraryItem":
        kind = ItemKind(data["type"])
        if kind is ItemKind.BOOK:
            item = LibraryItem.book(data["id"], data["title"], data["author"], data["pages"])
        elif kind is ItemKind.AUDIOBOOK:
            item = LibraryItem.audiobook(data["id"], data["title"], data["author"], data["hours"])
        else:
            item = LibraryItem.emagazine(data["id"], data["title"], data["author"], data["issue"])
            item.archived = bool(data.get("archived", False))

        # Lending state is restored only when it is complete
        borrower = data.get("borrower")
        due_date = data.get("due_date")
        if not data.get("available", True) and borrower and due_date:
            item.available = False
            item.borrower = borrower
            item.due_date = datetime.fromisoformat(due_date) if isinstance(due_date, str) else due_date
        return item
