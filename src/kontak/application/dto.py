"""Result types returned by application services."""

from dataclasses import dataclass, field
from datetime import datetime

from kontak.domain import Contact


@dataclass(frozen=True)
class ContactSaved:
    contact: Contact
    created: bool = True


@dataclass(frozen=True)
class Deleted:
    contact_id: str


@dataclass(frozen=True)
class Duplicate:
    """Another contact already holds the phone number."""

    contact_id: str
    name: str


@dataclass(frozen=True)
class Invalid:
    reason: str


@dataclass(frozen=True)
class NotFound:
    contact_id: str


@dataclass(frozen=True)
class OperationFailed:
    """A store, storage or format failure surfaced to the user."""

    error: str
    format_error: bool = False


@dataclass(frozen=True)
class SearchResult:
    contacts: list[Contact] = field(default_factory=list)
    admin_trigger: bool = False


@dataclass(frozen=True)
class ExportFile:
    content: str
    filename: str
    media_type: str


@dataclass(frozen=True)
class ImportCompleted:
    count: int
    skipped: int = 0


@dataclass(frozen=True)
class BackupInfo:
    name: str
    size: int
    created_at: datetime


@dataclass(frozen=True)
class BackupCreated:
    name: str
    count: int
    message: str


@dataclass(frozen=True)
class ExternalImportCompleted:
    count: int
    message: str


@dataclass(frozen=True)
class ExternalSyncCompleted:
    updated: int
    failed: int
    message: str
