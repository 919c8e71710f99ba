"""Snapshot all contacts into backup storage; list, download and delete snapshots."""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone

from kontak.application.dto import BackupCreated, BackupInfo, OperationFailed
from kontak.application.ports import BackupStorage, ContactRepository, Notifier
from kontak.errors import KontakError

logger = logging.getLogger(__name__)

BACKUP_NAME_RE = re.compile(
    r"^backup-(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z)-(\d+)kontak\.json$"
)
_NAME_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%f"


def iso_timestamp(now: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and 'Z', e.g. 2024-01-20T10:30:00.000Z."""
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def backup_name(now: datetime, count: int) -> str:
    timestamp = re.sub(r"[:.]", "-", iso_timestamp(now))
    return f"backup-{timestamp}-{count}kontak.json"


def is_backup_name(name: str) -> bool:
    return bool(BACKUP_NAME_RE.match(name or ""))


def backup_name_timestamp(name: str) -> datetime | None:
    """Creation time encoded in a snapshot name, or None if the name does not match."""
    match = BACKUP_NAME_RE.match(name or "")
    if not match:
        return None
    stamp = match.group(1)[:-1]  # drop 'Z'
    return datetime.strptime(stamp, _NAME_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def relative_time_label(created_at: datetime, now: datetime) -> str:
    seconds = (now - created_at).total_seconds()
    hours = int(seconds // 3600)
    if hours < 1:
        return "just now"
    if hours < 24:
        return f"~{hours} hours ago"
    days = hours // 24
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupService:
    """Backups are immutable JSON arrays of every contact, ordered by name."""

    def __init__(
        self,
        repository: ContactRepository,
        storage: BackupStorage,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repository
        self._storage = storage
        self._notifier = notifier
        self._clock = clock

    def create_backup(self) -> BackupCreated | OperationFailed:
        try:
            contacts = self._repo.list_all()
            name = backup_name(self._clock(), len(contacts))
            payload = json.dumps(
                [c.to_dict() for c in contacts], indent=2, ensure_ascii=False
            )
            self._storage.put(name, payload.encode("utf-8"))
        except KontakError as e:
            logger.warning("Backup failed: %s", e)
            self._notifier.error(str(e) or "Backup failed")
            return OperationFailed(error=str(e) or "Backup failed")
        logger.info("Backup saved: %s (%d contacts)", name, len(contacts))
        self._notifier.success(f"Backup done! {len(contacts)} contacts saved.")
        return BackupCreated(
            name=name, count=len(contacts), message=f"Backup saved: {name}"
        )

    def list_backups(self) -> list[BackupInfo] | OperationFailed:
        """Snapshots newest first."""
        try:
            entries = self._storage.list()
        except KontakError as e:
            return self._failed("Failed to load backups", e)
        infos = [
            BackupInfo(name=name, size=size, created_at=created_at)
            for name, size, created_at in entries
            if is_backup_name(name)
        ]
        infos.sort(key=lambda b: b.created_at, reverse=True)
        return infos

    def download_backup(self, name: str) -> bytes | None | OperationFailed:
        if not is_backup_name(name):
            return None
        try:
            return self._storage.get(name)
        except KontakError as e:
            return self._failed("Failed to download backup", e)

    def delete_backup(self, name: str) -> bool | OperationFailed:
        if not is_backup_name(name):
            return False
        try:
            removed = self._storage.remove(name)
        except KontakError as e:
            return self._failed("Failed to delete backup", e)
        if removed:
            self._notifier.success("Backup deleted")
        return removed

    def relative_label(self, info: BackupInfo) -> str:
        return relative_time_label(info.created_at, self._clock())

    def _failed(self, message: str, error: Exception) -> OperationFailed:
        logger.warning("%s: %s", message, error)
        self._notifier.error(message)
        return OperationFailed(error=f"{message}: {error}")
