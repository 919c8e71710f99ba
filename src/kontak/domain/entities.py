"""Domain entities: Contact and ContactDraft."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from kontak.domain.phone import normalize_phone

# Known e-wallet providers and their display labels.
EWALLET_LABELS = {
    "dana": "DANA",
    "gopay": "GoPay",
    "ovo": "OVO",
    "shopeepay": "ShopeePay",
}
EWALLET_PROVIDERS = frozenset(EWALLET_LABELS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_ewallet(tags: Iterable[str] | None) -> tuple[str, ...]:
    """Lower-case and trim tags, drop empties and repeats, keep entry order."""
    out: list[str] = []
    for tag in tags or ():
        clean = str(tag).strip().lower()
        if clean and clean not in out:
            out.append(clean)
    return tuple(out)


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def initials(name: str) -> str:
    """First letters of the first two words, upper-cased."""
    return "".join(word[0] for word in (name or "").split()[:2]).upper()


@dataclass(frozen=True)
class ContactDraft:
    """
    Unvalidated contact data as entered in a form or read from a file.
    Nothing is enforced here; Contact does that when the draft is stored.
    """

    name: str = ""
    phone: str | None = None
    ewallet: list[str] = field(default_factory=list)
    email: str | None = None
    company: str | None = None
    notes: str | None = None

    def to_contact(self, contact_id: str | None = None) -> "Contact":
        """Build a Contact (raises ValueError if the name is blank)."""
        kwargs = {}
        if contact_id is not None:
            kwargs["id"] = contact_id
        return Contact(
            name=self.name,
            phone=self.phone,
            ewallet=tuple(self.ewallet or ()),
            email=self.email,
            company=self.company,
            notes=self.notes,
            **kwargs,
        )


@dataclass(frozen=True)
class Contact:
    """
    A person in the address book.
    Name is required; phone is stored digits-only; e-wallet tags form an ordered set.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = field(default="")
    phone: str | None = None
    ewallet: tuple[str, ...] = ()
    email: str | None = None
    company: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        name = (self.name or "").strip()
        if not name:
            raise ValueError("Contact name must be non-empty.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "phone", normalize_phone(self.phone))
        object.__setattr__(self, "ewallet", normalize_ewallet(self.ewallet))
        for attr in ("email", "company", "notes"):
            object.__setattr__(self, attr, _optional_text(getattr(self, attr)))

    def to_dict(self) -> dict:
        """All stored fields, JSON-serializable (used for backups)."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "ewallet": list(self.ewallet),
            "email": self.email,
            "company": self.company,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }
