"""Contact CRUD, search, and the duplicate-phone guard."""

import logging
from dataclasses import replace

from kontak.application.dto import (
    ContactSaved,
    Deleted,
    Duplicate,
    Invalid,
    NotFound,
    OperationFailed,
    SearchResult,
)
from kontak.application.ports import ContactRepository, Notifier
from kontak.application.search import MATCHERS, is_admin_trigger
from kontak.domain import MIN_LOOKUP_LENGTH, Contact, ContactDraft, normalize_phone
from kontak.errors import PhoneTaken, StoreError

logger = logging.getLogger(__name__)


class ContactService:
    """List, search, create, edit and delete contacts for one owner.

    The duplicate-phone check is a lookup before the write, so two concurrent
    creates with the same phone can both pass it. Enable the store-level
    constraint when that matters.
    """

    def __init__(self, repository: ContactRepository, notifier: Notifier) -> None:
        self._repo = repository
        self._notifier = notifier

    def list_contacts(self) -> list[Contact] | OperationFailed:
        """Return all contacts ordered by name."""
        try:
            return self._repo.list_all()
        except StoreError as e:
            return self._failed("Failed to load contacts", e)

    def get_contact(self, contact_id: str) -> Contact | None | OperationFailed:
        """Return a contact by id, or None if not found."""
        try:
            return self._repo.get_by_id(contact_id)
        except StoreError as e:
            return self._failed("Failed to load contact", e)

    def search_contacts(
        self, query: str | None, mode: str = "keywords"
    ) -> SearchResult | OperationFailed:
        """Filter contacts by query.

        The admin trigger does not filter: every contact is returned and
        admin_trigger is set.
        """
        matcher = MATCHERS.get(mode)
        if matcher is None:
            raise ValueError(f"Unknown search mode: {mode}")
        contacts = self.list_contacts()
        if isinstance(contacts, OperationFailed):
            return contacts
        if is_admin_trigger(query):
            return SearchResult(contacts=contacts, admin_trigger=True)
        if not query:
            return SearchResult(contacts=contacts)
        return SearchResult(contacts=[c for c in contacts if matcher(c, query)])

    def check_phone(
        self, phone: str | None, editing_id: str | None = None
    ) -> Duplicate | OperationFailed | None:
        """Return the contact that already holds this phone, unless it is the one being edited.

        Phones shorter than MIN_LOOKUP_LENGTH digits are not looked up.
        """
        cleaned = normalize_phone(phone)
        if not cleaned or len(cleaned) < MIN_LOOKUP_LENGTH:
            return None
        try:
            existing = self._repo.find_by_phone(cleaned)
        except StoreError as e:
            return self._failed("Failed to check phone number", e)
        if existing is None or existing.id == editing_id:
            return None
        return Duplicate(contact_id=existing.id, name=existing.name)

    def create_contact(
        self, draft: ContactDraft
    ) -> ContactSaved | Duplicate | Invalid | OperationFailed:
        try:
            contact = draft.to_contact()
        except ValueError:
            return Invalid(reason="Name is required.")
        try:
            conflict = self.check_phone(contact.phone)
            if conflict is not None:
                return conflict
            self._repo.add(contact)
        except PhoneTaken:
            return self._taken(contact)
        except StoreError as e:
            return self._failed("Failed to add contact", e)
        self._notifier.success("Contact added!")
        return ContactSaved(contact=contact, created=True)

    def update_contact(
        self, contact_id: str, draft: ContactDraft
    ) -> ContactSaved | Duplicate | Invalid | NotFound | OperationFailed:
        try:
            existing = self._repo.get_by_id(contact_id)
            if existing is None:
                return NotFound(contact_id=contact_id)
            try:
                contact = draft.to_contact(contact_id=contact_id)
            except ValueError:
                return Invalid(reason="Name is required.")
            contact = replace(contact, created_at=existing.created_at)
            conflict = self.check_phone(contact.phone, editing_id=contact_id)
            if conflict is not None:
                return conflict
            if not self._repo.update(contact):
                return NotFound(contact_id=contact_id)
        except PhoneTaken:
            return self._taken(contact)
        except StoreError as e:
            return self._failed("Failed to update contact", e)
        self._notifier.success("Contact updated!")
        return ContactSaved(contact=contact, created=False)

    def delete_contact(self, contact_id: str) -> Deleted | NotFound | OperationFailed:
        try:
            removed = self._repo.delete(contact_id)
        except StoreError as e:
            return self._failed("Failed to delete contact", e)
        if not removed:
            return NotFound(contact_id=contact_id)
        self._notifier.success("Contact deleted!")
        return Deleted(contact_id=contact_id)

    def _failed(self, message: str, error: Exception) -> OperationFailed:
        logger.warning("%s: %s", message, error)
        self._notifier.error(message)
        return OperationFailed(error=f"{message}: {error}")

    def _taken(self, contact: Contact) -> Duplicate:
        # Lost the race against another write; report whoever holds the phone now.
        try:
            holder = self._repo.find_by_phone(contact.phone)
        except StoreError as e:
            logger.warning("Phone %s is taken; holder lookup failed: %s", contact.phone, e)
            holder = None
        if holder is None:
            return Duplicate(contact_id="", name="")
        return Duplicate(contact_id=holder.id, name=holder.name)
