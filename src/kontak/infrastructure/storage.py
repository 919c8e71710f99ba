"""Filesystem implementation of BackupStorage (one directory per bucket)."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from kontak.application.backup_service import backup_name_timestamp
from kontak.errors import StorageError

logger = logging.getLogger(__name__)


def _plain_name(value: str, kind: str) -> str:
    """Reject anything that is not a single path segment under the base directory."""
    if (
        not value
        or value in (".", "..")
        or any(ch in value for ch in ("/", "\\", "\0"))
    ):
        raise StorageError(f"Invalid {kind}: {value!r}")
    return value


class LocalBackupStorage:
    """Stores snapshot objects as files under base_dir/bucket.

    Bucket and object names are plain file names; anything containing a path
    separator is rejected. created_at comes from the timestamp in the name when
    it has one, otherwise from the file's modification time.
    """

    def __init__(self, base_dir: Path | str, bucket: str = "default") -> None:
        self._dir = Path(base_dir).expanduser() / _plain_name(bucket, "bucket name")

    def _path(self, name: str) -> Path:
        return self._dir / _plain_name(name, "object name")

    def put(self, name: str, data: bytes) -> None:
        path = self._path(name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise StorageError(f"Backup already exists: {name}") from e
        except OSError as e:
            raise StorageError(f"Failed to write backup {name}: {e}") from e

    def list(self) -> list[tuple[str, int, datetime]]:
        if not self._dir.exists():
            return []
        out = []
        try:
            for entry in self._dir.iterdir():
                if not entry.is_file():
                    continue
                stat = entry.stat()
                created_at = backup_name_timestamp(entry.name) or datetime.fromtimestamp(
                    stat.st_mtime, tz=timezone.utc
                )
                out.append((entry.name, stat.st_size, created_at))
        except OSError as e:
            raise StorageError(f"Failed to list backups: {e}") from e
        return out

    def get(self, name: str) -> bytes | None:
        path = self._path(name)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read backup {name}: {e}") from e

    def remove(self, name: str) -> bool:
        path = self._path(name)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete backup {name}: {e}") from e
        logger.info("Deleted backup %s", name)
        return True
