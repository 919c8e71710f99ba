"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from kontak.application.backup_service import BackupService, relative_time_label
from kontak.application.contact_service import ContactService
from kontak.application.dto import (
    BackupCreated,
    BackupInfo,
    ContactSaved,
    Deleted,
    Duplicate,
    ExportFile,
    ExternalImportCompleted,
    ExternalSyncCompleted,
    ImportCompleted,
    Invalid,
    NotFound,
    OperationFailed,
    SearchResult,
)
from kontak.application.external_import import ExternalContactSource, ExternalImportService
from kontak.application.ports import BackupStorage, ContactRepository, Notifier
from kontak.application.transfer_service import TransferService

__all__ = [
    "BackupCreated",
    "BackupInfo",
    "BackupService",
    "BackupStorage",
    "ContactRepository",
    "ContactSaved",
    "ContactService",
    "Deleted",
    "Duplicate",
    "ExportFile",
    "ExternalContactSource",
    "ExternalImportCompleted",
    "ExternalImportService",
    "ExternalSyncCompleted",
    "ImportCompleted",
    "Invalid",
    "Notifier",
    "NotFound",
    "OperationFailed",
    "SearchResult",
    "TransferService",
    "relative_time_label",
]
