from typing import Optional


class BorrowValidator:
    """Input checks the CLI and API run before calling the desk."""

    MAX_NAME_LENGTH = 100
    MAX_LOAN_DAYS = 365

    @staticmethod
    def normalize_name(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        # collapse inner whitespace
        return " ".join(raw.split())

    @staticmethod
    def validate_borrower(name: Optional[str]) -> bool:
        cleaned = BorrowValidator.normalize_name(name)
        if not cleaned or len(cleaned) > BorrowValidator.MAX_NAME_LENGTH:
            return False
        # must not be digits only
        return not cleaned.replace(" ", "").isdigit()

    @staticmethod
    def validate_days(days: Optional[int]) -> bool:
        if days is None or isinstance(days, bool):
            return False
        return 1 <= days <= BorrowValidator.MAX_LOAN_DAYS

    @staticmethod
    def parse_item_id(raw: Optional[str]) -> Optional[int]:
        """Turn user input into a positive item id, or None when it isn't one."""
        if raw is None:
            return None
        s = raw.strip()
        if not s.isdigit():
            return None
        value = int(s)
        return value if value > 0 else None
