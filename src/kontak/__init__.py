"""
Kontak core: clean-architecture layout.

- domain: Contact entity, e-wallet tags, phone normalization. No outer dependencies.
- application: use cases (ContactService, TransferService, BackupService,
  ExternalImportService), ports, DTOs.
- formats: CSV, JSON and vCard codecs.
- infrastructure: adapters (InMemoryContactRepository, Neo4jContactRepository,
  LocalBackupStorage, notifiers).
"""

from kontak.application import (
    BackupService,
    ContactRepository,
    ContactService,
    Duplicate,
    ExternalImportService,
    Invalid,
    NotFound,
    OperationFailed,
    TransferService,
)
from kontak.domain import Contact, ContactDraft
from kontak.infrastructure import (
    InMemoryContactRepository,
    LocalBackupStorage,
    LoggingNotifier,
    Neo4jContactRepository,
)

__all__ = [
    "BackupService",
    "Contact",
    "ContactDraft",
    "ContactRepository",
    "ContactService",
    "Duplicate",
    "ExternalImportService",
    "InMemoryContactRepository",
    "Invalid",
    "LocalBackupStorage",
    "LoggingNotifier",
    "Neo4jContactRepository",
    "NotFound",
    "OperationFailed",
    "TransferService",
]
