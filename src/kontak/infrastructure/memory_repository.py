"""In-memory implementation of ContactRepository (no DB)."""

import threading

from kontak.domain import Contact
from kontak.errors import PhoneTaken


def _name_order(contact: Contact) -> tuple[str, str]:
    return (contact.name.casefold(), contact.id)


class InMemoryContactRepository:
    """Stores contacts in memory, listed by name.
    With unique_phone=True a second contact with the same phone raises PhoneTaken,
    like the Neo4j constraint does.
    """

    def __init__(self, *, unique_phone: bool = False) -> None:
        self._by_id: dict[str, Contact] = {}
        self._unique_phone = unique_phone
        self._lock = threading.Lock()

    def _check_phone(self, contact: Contact) -> None:
        if not self._unique_phone or not contact.phone:
            return
        for other in self._by_id.values():
            if other.id != contact.id and other.phone == contact.phone:
                raise PhoneTaken(contact.phone)

    def add(self, contact: Contact) -> None:
        self.add_many([contact])

    def add_many(self, contacts: list[Contact]) -> None:
        with self._lock:
            staged = dict(self._by_id)
            for contact in contacts:
                if contact.id in staged:
                    continue
                if self._unique_phone and contact.phone and any(
                    c.phone == contact.phone for c in staged.values()
                ):
                    raise PhoneTaken(contact.phone)
                staged[contact.id] = contact
            self._by_id = staged

    def get_by_id(self, contact_id: str) -> Contact | None:
        return self._by_id.get(contact_id)

    def list_all(self) -> list[Contact]:
        return sorted(self._by_id.values(), key=_name_order)

    def find_by_phone(self, phone: str) -> Contact | None:
        for contact in self.list_all():
            if contact.phone == phone:
                return contact
        return None

    def update(self, contact: Contact) -> bool:
        with self._lock:
            if contact.id not in self._by_id:
                return False
            self._check_phone(contact)
            self._by_id[contact.id] = contact
            return True

    def delete(self, contact_id: str) -> bool:
        with self._lock:
            return self._by_id.pop(contact_id, None) is not None
