"""vCard 3.0 import/export (FN, N, TEL plus optional EMAIL, ORG, NOTE)."""

import logging
from collections.abc import Iterable

import vobject

from kontak.domain import ContactDraft, normalize_phone

logger = logging.getLogger(__name__)

_BEGIN = "BEGIN:VCARD"


def split_name(name: str) -> tuple[str, str]:
    """Return (given, family): first token, then the remaining tokens joined.

    "Jane Mary Doe" -> ("Jane", "Mary Doe"). Multi-word given names end up in
    the family name.
    """
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def contact_to_vcard(contact) -> str:
    card = vobject.vCard()
    card.add("fn").value = contact.name
    given, family = split_name(contact.name)
    card.add("n").value = vobject.vcard.Name(family=family, given=given)
    if contact.phone:
        tel = card.add("tel")
        tel.value = contact.phone
        tel.type_param = "CELL"
    if getattr(contact, "email", None):
        card.add("email").value = contact.email
    if getattr(contact, "company", None):
        card.add("org").value = [contact.company]
    if getattr(contact, "notes", None):
        card.add("note").value = contact.notes
    return card.serialize()


def export_vcard(contacts: Iterable) -> str:
    # serialize() ends every record with CRLF, so records are already line-separated
    return "".join(contact_to_vcard(c) for c in contacts)


def _first(card, key: str) -> str | None:
    lines = card.contents.get(key)
    if not lines:
        return None
    value = lines[0].value
    if isinstance(value, list):
        value = value[0] if value else ""
    return str(value).strip() or None


def parse_vcard(text: str) -> list[ContactDraft]:
    """Parse concatenated vCards. Cards without an FN line are dropped.

    Input is split on BEGIN:VCARD and each chunk is read on its own, so one
    unreadable card does not lose the rest of the file.
    """
    drafts = []
    for number, chunk in enumerate((text or "").split(_BEGIN)[1:], 1):
        try:
            card = vobject.readOne(_BEGIN + chunk)
        except vobject.base.ParseError as e:
            logger.warning("Skipping unreadable vCard #%d: %s", number, e)
            continue
        name = _first(card, "fn")
        if not name:
            continue
        drafts.append(
            ContactDraft(
                name=name,
                phone=normalize_phone(_first(card, "tel")),
                email=_first(card, "email"),
                company=_first(card, "org"),
                notes=_first(card, "note"),
            )
        )
    return drafts
