"""Export contacts to CSV/JSON/vCard and bulk-import them back."""

import logging

from kontak.application.dto import ExportFile, ImportCompleted, Invalid, OperationFailed
from kontak.application.ports import ContactRepository, Notifier
from kontak.errors import ContactFormatError, StoreError
from kontak.formats import FORMATS

logger = logging.getLogger(__name__)


class TransferService:
    """Moves contacts between the store and text files."""

    def __init__(self, repository: ContactRepository, notifier: Notifier) -> None:
        self._repo = repository
        self._notifier = notifier

    def export(self, fmt: str) -> ExportFile | OperationFailed:
        _, exporter, filename, media_type = _lookup(fmt)
        try:
            contacts = self._repo.list_all()
        except StoreError as e:
            logger.warning("Export %s failed: %s", fmt, e)
            self._notifier.error("Export failed")
            return OperationFailed(error=str(e))
        self._notifier.success(f"Export {fmt.upper()} done!")
        return ExportFile(content=exporter(contacts), filename=filename, media_type=media_type)

    def import_text(
        self, fmt: str, text: str
    ) -> ImportCompleted | Invalid | OperationFailed:
        """Parse text and insert every contact with a name in one request.

        Drafts with a blank name are skipped. Nothing is written when the file
        yields no contacts or the store rejects the insert.
        """
        parser = _lookup(fmt)[0]
        try:
            drafts = parser(text)
        except ContactFormatError as e:
            self._notifier.error(str(e))
            return OperationFailed(error=str(e), format_error=True)

        contacts = []
        skipped = 0
        for draft in drafts:
            try:
                contacts.append(draft.to_contact())
            except ValueError:
                skipped += 1
        if not contacts:
            self._notifier.error("No contacts found in file")
            return Invalid(reason="No contacts found in file")

        try:
            self._repo.add_many(contacts)
        except StoreError as e:
            logger.warning("Import %s failed: %s", fmt, e)
            self._notifier.error(f"Import failed: {e}")
            return OperationFailed(error=str(e))
        if skipped:
            logger.info("Import %s skipped %d rows without a name", fmt, skipped)
        self._notifier.success(f"{len(contacts)} contacts imported!")
        return ImportCompleted(count=len(contacts), skipped=skipped)


def _lookup(fmt: str):
    try:
        return FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unsupported format: {fmt}") from None
