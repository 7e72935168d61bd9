"""Recoverable error conditions raised by the circulation desk core.

None of these are fatal. The ``Library`` desk catches them at its boundary and
hands them back inside an ``Outcome``; the CLI and HTTP layers decide how to
present them.
"""

from __future__ import annotations

from typing import Optional


class LibraryError(Exception):
    """Base class for circulation desk errors."""

    code = "library_error"

    def __init__(self, message: str, item_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.item_id = item_id


class ItemNotFoundError(LibraryError):
    """Requested item id does not exist in the catalog."""

    code = "item_not_found"

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item with ID {item_id} not found.", item_id)


class ItemNotAvailableError(LibraryError):
    """Borrow attempted on an item that is already lent out."""

    code = "item_not_available"

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item id {item_id} is not available for borrowing.", item_id)


class AlreadyAvailableError(LibraryError):
    """Return attempted on an item that is not lent. Informational only."""

    code = "already_available"

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item {item_id} is already available, no need to return.", item_id)


class WrongVariantError(LibraryError):
    """A variant-specific operation was invoked on an incompatible item type."""

    code = "wrong_variant"

    def __init__(self, item_id: int, expected: str, actual: str) -> None:
        super().__init__(f"Item {item_id} is a {actual}, not a {expected}.", item_id)
        self.expected = expected
        self.actual = actual


class SeedError(LibraryError):
    code = "seed_error"


class InvalidLoanError(LibraryError):
    """Loan length produces a due date outside the supported calendar range."""

    code = "invalid_loan"

    def __init__(self, item_id: int, days: int) -> None:
        super().__init__(f"A loan of {days} days for item {item_id} is out of range.", item_id)
        self.days = days
