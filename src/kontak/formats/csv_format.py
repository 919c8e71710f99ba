"""CSV import/export: header row plus name,phone,ewallet(;-separated) rows."""

from collections.abc import Iterable

from kontak.domain import ContactDraft

CSV_HEADER = "Name,Phone,E-Wallet"
EWALLET_SEPARATOR = ";"


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line into fields.

    A double quote toggles the in-quotes state and is dropped; commas inside
    quotes are kept. Doubled quotes ("") are not unescaped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def parse_csv(text: str) -> list[ContactDraft]:
    """Parse CSV text into drafts. Row 0 is always treated as the header."""
    lines = [line for line in (text or "").splitlines() if line.strip()]
    drafts = []
    for line in lines[1:]:
        cols = parse_csv_line(line)
        name = cols[0].strip()
        if not name:
            continue
        phone = cols[1].strip() if len(cols) > 1 else ""
        ewallet_col = cols[2] if len(cols) > 2 else ""
        drafts.append(
            ContactDraft(
                name=name,
                phone=phone or None,
                ewallet=[t.strip() for t in ewallet_col.split(EWALLET_SEPARATOR) if t.strip()],
            )
        )
    return drafts


def export_csv(contacts: Iterable) -> str:
    """Render contacts as CSV with every field double-quoted."""
    rows = [
        f'"{c.name}","{c.phone or ""}","{EWALLET_SEPARATOR.join(c.ewallet or ())}"'
        for c in contacts
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)
