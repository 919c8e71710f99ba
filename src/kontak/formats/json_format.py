"""JSON import/export: array of {name, phone, ewallet} objects."""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from kontak.domain import ContactDraft
from kontak.errors import ContactFormatError


def draft_from_mapping(item: Any) -> ContactDraft:
    """Map one decoded JSON element onto a draft.

    Defaults per field:
        name    -> "" when missing or falsy
        phone   -> None when missing or falsy; numbers are stringified
        ewallet -> [] unless the value is already a list
        email, company, notes -> None when missing or falsy
    Elements that are not objects map to an empty draft.
    """
    if not isinstance(item, Mapping):
        item = {}
    phone = item.get("phone") or None
    ewallet = item.get("ewallet")
    return ContactDraft(
        name=str(item.get("name") or ""),
        phone=str(phone) if phone is not None else None,
        ewallet=[str(t) for t in ewallet] if isinstance(ewallet, list) else [],
        email=item.get("email") or None,
        company=item.get("company") or None,
        notes=item.get("notes") or None,
    )


def parse_json(text: str) -> list[ContactDraft]:
    """Decode a JSON array of contacts. Raises ContactFormatError otherwise."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ContactFormatError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ContactFormatError("Invalid JSON format: expected a list of contacts")
    return [draft_from_mapping(item) for item in data]


def export_json(contacts: Iterable) -> str:
    data = [
        {"name": c.name, "phone": c.phone, "ewallet": list(c.ewallet or ())}
        for c in contacts
    ]
    return json.dumps(data, indent=2, ensure_ascii=False)
