"""Copy contacts from an external store into the local one."""

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Protocol

from kontak.application.dto import ExternalImportCompleted, ExternalSyncCompleted, OperationFailed
from kontak.application.ports import ContactRepository, Notifier
from kontak.domain import Contact, normalize_ewallet, normalize_phone
from kontak.errors import KontakError
from kontak.formats import draft_from_mapping

logger = logging.getLogger(__name__)

BATCH_SIZE = 100
DEFAULT_NAME = "Unnamed"


class ExternalContactSource(Protocol):
    """Read-only access to another contact store."""

    def fetch_contacts(self) -> list[Mapping]:
        """Raw contact records ordered by name."""
        ...

    def close(self) -> None:
        ...


# (url, key, user) -> source
SourceOpener = Callable[[str, str, str], ExternalContactSource]


def contact_from_source(record: Mapping) -> Contact:
    draft = draft_from_mapping(record)
    return Contact(
        name=draft.name.strip() or DEFAULT_NAME,
        phone=draft.phone,
        ewallet=tuple(draft.ewallet),
    )


class ExternalImportService:
    """Imports run in sequential batches; e-wallet sync runs on a bounded pool."""

    def __init__(
        self,
        repository: ContactRepository,
        open_source: SourceOpener,
        notifier: Notifier,
        *,
        max_workers: int = 4,
    ) -> None:
        self._repo = repository
        self._open_source = open_source
        self._notifier = notifier
        self._max_workers = max(1, max_workers)

    def _fetch(self, url: str, key: str, user: str) -> list[Mapping]:
        source = self._open_source(url, key, user)
        try:
            return source.fetch_contacts()
        finally:
            source.close()

    def import_contacts(
        self, url: str, key: str, user: str = "neo4j"
    ) -> ExternalImportCompleted | OperationFailed:
        try:
            records = self._fetch(url, key, user)
        except KontakError as e:
            return self._failed(f"Failed to read source: {e}")
        if not records:
            return ExternalImportCompleted(count=0, message="No contacts found")

        contacts = [contact_from_source(r) for r in records]
        inserted = 0
        for start in range(0, len(contacts), BATCH_SIZE):
            batch = contacts[start:start + BATCH_SIZE]
            try:
                self._repo.add_many(batch)
            except KontakError as e:
                # Earlier batches stay committed.
                logger.warning("Batch at %d failed after %d inserted", start, inserted)
                return self._failed(f"Failed to insert batch: {e}")
            inserted += len(batch)
        message = f"{inserted} contacts imported!"
        self._notifier.success(message)
        return ExternalImportCompleted(count=inserted, message=message)

    def sync_ewallets(
        self, url: str, key: str, user: str = "neo4j"
    ) -> ExternalSyncCompleted | OperationFailed:
        """Copy e-wallet tags from source contacts onto local contacts with the same phone."""
        try:
            records = self._fetch(url, key, user)
        except KontakError as e:
            return self._failed(f"Failed to read source: {e}")

        pending: list[tuple[str, tuple[str, ...]]] = []
        for record in records:
            phone = normalize_phone(record.get("phone"))
            tags = record.get("ewallet")
            if phone and isinstance(tags, list):
                pending.append((phone, normalize_ewallet(tags)))

        updated = failed = 0
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [pool.submit(self._apply_ewallet, p, t) for p, t in pending]
            for future in as_completed(futures):
                try:
                    if future.result():
                        updated += 1
                except KontakError as e:
                    failed += 1
                    logger.debug("E-wallet update failed: %s", e)
        if failed:
            logger.warning("E-wallet sync: %d updates failed", failed)
        message = f"{updated} contacts updated!"
        self._notifier.success(message)
        return ExternalSyncCompleted(updated=updated, failed=failed, message=message)

    def _apply_ewallet(self, phone: str, tags: tuple[str, ...]) -> bool:
        local = self._repo.find_by_phone(phone)
        if local is None or local.ewallet == tags:
            return False
        return self._repo.update(replace(local, ewallet=tags))

    def _failed(self, message: str) -> OperationFailed:
        logger.warning(message)
        self._notifier.error(message)
        return OperationFailed(error=message)
