"""Client-style contact search: keyword AND-matching and plain substring."""

import re

from kontak.domain import Contact

ADMIN_TRIGGER = "edit"

_TOKEN_SPLIT = re.compile(r"[\s,/]+")


def is_admin_trigger(query: str | None) -> bool:
    """The literal query 'edit' opens the admin menu instead of searching."""
    return (query or "").lower() == ADMIN_TRIGGER


def keyword_tokens(query: str | None) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split((query or "").lower()) if t]


def searchable_text(contact: Contact) -> str:
    parts = [contact.name, contact.phone, *contact.ewallet]
    return " ".join(p for p in parts if p).lower()


def matches_keywords(contact: Contact, query: str | None) -> bool:
    """True if every keyword appears somewhere in name, phone or e-wallet tags."""
    text = searchable_text(contact)
    return all(kw in text for kw in keyword_tokens(query))


def matches_substring(contact: Contact, query: str | None) -> bool:
    """True if the query is a substring of name + phone (case-insensitive)."""
    return (query or "").lower() in (contact.name + (contact.phone or "")).lower()


MATCHERS = {
    "keywords": matches_keywords,
    "substring": matches_substring,
}
