"""Application ports (interfaces). Implemented by infrastructure adapters."""

from datetime import datetime
from typing import Protocol

from kontak.domain import Contact


class ContactRepository(Protocol):
    """Persists and queries contacts for one owner."""

    def add(self, contact: Contact) -> None:
        """Store a new contact."""
        ...

    def add_many(self, contacts: list[Contact]) -> None:
        """Store several contacts in one request."""
        ...

    def get_by_id(self, contact_id: str) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def list_all(self) -> list[Contact]:
        """Return all contacts ordered by name."""
        ...

    def find_by_phone(self, phone: str) -> Contact | None:
        """Return one contact holding exactly this normalized phone, or None."""
        ...

    def update(self, contact: Contact) -> bool:
        """Replace the stored fields of an existing contact. False if not found."""
        ...

    def delete(self, contact_id: str) -> bool:
        """Remove a contact. False if not found."""
        ...


class BackupStorage(Protocol):
    """Object storage for backup snapshots."""

    def put(self, name: str, data: bytes) -> None:
        """Write a new object. Must not overwrite an existing one."""
        ...

    def list(self) -> list[tuple[str, int, datetime]]:
        """Return (name, size, created_at) for every stored object."""
        ...

    def get(self, name: str) -> bytes | None:
        ...

    def remove(self, name: str) -> bool:
        ...


class Notifier(Protocol):
    """User-facing notifications (toasts in the web client)."""

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...
