"""Phone number normalization for storage and deduplication."""

import re

# Characters stripped from user input: whitespace, dashes, dots, parentheses, plus.
_STRIP_PATTERN = re.compile(r"[\s\-.()+]")

# Shortest normalized phone worth looking up for duplicates.
MIN_LOOKUP_LENGTH = 4


def normalize_phone(raw: str | int | None) -> str | None:
    """Return the phone with separators and '+' removed, or None if nothing is left.

    Only the separator characters are removed; letters or other symbols are
    kept as entered.
    """
    if raw is None:
        return None
    cleaned = _STRIP_PATTERN.sub("", str(raw))
    return cleaned or None


def format_phone_display(phone: str | None) -> str:
    """Group digits as 4-4-rest for display, e.g. '0821 3613 8339'."""
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) <= 4:
        return digits
    if len(digits) <= 8:
        return f"{digits[:4]} {digits[4:]}"
    return f"{digits[:4]} {digits[4:8]} {digits[8:]}"
