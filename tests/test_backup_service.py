"""Tests for BackupService, snapshot naming and LocalBackupStorage."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from kontak.application import BackupService, OperationFailed, relative_time_label
from kontak.application.backup_service import (
    backup_name,
    backup_name_timestamp,
    is_backup_name,
)
from kontak.domain import Contact
from kontak.errors import StorageError
from kontak.infrastructure import InMemoryContactRepository, LocalBackupStorage

NOW = datetime(2024, 1, 20, 10, 30, 0, 123456, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _service(tmp_path, notifier, clock=None, contacts=()):
    repo = InMemoryContactRepository()
    repo.add_many(list(contacts))
    storage = LocalBackupStorage(tmp_path, bucket="default")
    return BackupService(repo, storage, notifier, clock=clock or _Clock(NOW)), storage


def test_backup_name_pattern():
    assert backup_name(NOW, 12) == "backup-2024-01-20T10-30-00-123Z-12kontak.json"
    assert is_backup_name("backup-2024-01-20T10-30-00-123Z-12kontak.json")
    assert not is_backup_name("../etc/passwd")
    assert not is_backup_name("backup-latest.json")


def test_backup_name_timestamp_roundtrip():
    name = backup_name(NOW, 3)
    assert backup_name_timestamp(name) == NOW.replace(microsecond=123000)
    assert backup_name_timestamp("notes.txt") is None


@pytest.mark.parametrize(
    ("age", "label"),
    [
        (timedelta(minutes=59), "just now"),
        (timedelta(hours=1), "~1 hours ago"),
        (timedelta(hours=23, minutes=59), "~23 hours ago"),
        (timedelta(hours=24), "1 day ago"),
        (timedelta(hours=47), "1 day ago"),
        (timedelta(days=2), "2 days ago"),
        (timedelta(days=30, hours=5), "30 days ago"),
    ],
)
def test_relative_time_label(age, label):
    assert relative_time_label(NOW - age, NOW) == label


def test_create_backup_writes_sorted_snapshot(tmp_path, notifier):
    contacts = [Contact(name="Sari", phone="0899"), Contact(name="Budi", ewallet=("dana",))]
    service, storage = _service(tmp_path, notifier, contacts=contacts)
    result = service.create_backup()
    assert result.count == 2
    assert result.name == "backup-2024-01-20T10-30-00-123Z-2kontak.json"
    assert result.message == f"Backup saved: {result.name}"

    data = json.loads(storage.get(result.name))
    assert [c["name"] for c in data] == ["Budi", "Sari"]
    assert data[0]["ewallet"] == ["dana"]
    assert set(data[0]) >= {"id", "name", "phone", "ewallet", "created_at"}
    assert notifier.successes == ["Backup done! 2 contacts saved."]


def test_create_backup_empty_store(tmp_path, notifier):
    service, storage = _service(tmp_path, notifier)
    result = service.create_backup()
    assert result.count == 0
    assert json.loads(storage.get(result.name)) == []


def test_backups_are_immutable(tmp_path, notifier):
    service, _ = _service(tmp_path, notifier)
    service.create_backup()
    again = service.create_backup()  # same clock, same name
    assert isinstance(again, OperationFailed)
    assert "already exists" in again.error
    assert notifier.errors


def test_list_newest_first_with_labels(tmp_path, notifier):
    clock = _Clock(NOW - timedelta(days=3))
    service, _ = _service(tmp_path, notifier, clock=clock, contacts=[Contact(name="A")])
    oldest = service.create_backup().name
    clock.now = NOW - timedelta(hours=5)
    middle = service.create_backup().name
    clock.now = NOW
    newest = service.create_backup().name
    (tmp_path / "default" / "readme.txt").write_text("not a backup")

    infos = service.list_backups()
    assert [b.name for b in infos] == [newest, middle, oldest]
    assert [service.relative_label(b) for b in infos] == ["just now", "~5 hours ago", "3 days ago"]
    assert infos[0].size > 0


def test_download_and_delete(tmp_path, notifier):
    service, _ = _service(tmp_path, notifier, contacts=[Contact(name="A")])
    name = service.create_backup().name
    assert json.loads(service.download_backup(name))[0]["name"] == "A"
    assert service.delete_backup(name) is True
    assert service.download_backup(name) is None
    assert service.delete_backup(name) is False
    assert service.list_backups() == []


def test_invalid_names_rejected(tmp_path, notifier):
    service, _ = _service(tmp_path, notifier)
    assert service.download_backup("../secret.json") is None
    assert service.delete_backup("../secret.json") is False


def test_storage_rejects_path_names(tmp_path):
    storage = LocalBackupStorage(tmp_path)
    with pytest.raises(StorageError):
        storage.put("../x.json", b"[]")
    assert storage.list() == []


def test_storage_rejects_bucket_outside_base_dir(tmp_path):
    for bucket in ("../../escaped", "..", "a/b", "a\\b", ""):
        with pytest.raises(StorageError):
            LocalBackupStorage(tmp_path / "backups", bucket=bucket)
    assert not (tmp_path / "escaped").exists()


class _UnreachableStorage:
    def put(self, name, data):
        raise StorageError("bucket unavailable")

    def list(self):
        raise StorageError("bucket unavailable")

    def get(self, name):
        raise StorageError("bucket unavailable")

    def remove(self, name):
        raise StorageError("bucket unavailable")


def test_storage_failures_are_reported_not_raised(notifier):
    service = BackupService(InMemoryContactRepository(), _UnreachableStorage(), notifier)
    name = backup_name(NOW, 0)
    for result in (
        service.list_backups(),
        service.download_backup(name),
        service.delete_backup(name),
        service.create_backup(),
    ):
        assert isinstance(result, OperationFailed)
        assert "bucket unavailable" in result.error
    assert notifier.errors[:3] == [
        "Failed to load backups",
        "Failed to download backup",
        "Failed to delete backup",
    ]
