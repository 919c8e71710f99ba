"""Tests for Settings.from_env."""

from pathlib import Path

import pytest

from kontak.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "NEO4J_URI",
        "NEO4J_USER",
        "NEO4J_PASSWORD",
        "KONTAK_STORE",
        "KONTAK_BACKUP_DIR",
        "KONTAK_UNIQUE_PHONE",
        "KONTAK_IMPORT_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings.from_env()
    assert s.neo4j_uri == "bolt://localhost:7687"
    assert s.store == "neo4j"
    assert s.backup_dir == Path("backups")
    assert s.unique_phone is False
    assert s.import_workers == 4


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("KONTAK_STORE", " Memory ")
    monkeypatch.setenv("KONTAK_BACKUP_DIR", str(tmp_path))
    monkeypatch.setenv("KONTAK_UNIQUE_PHONE", "yes")
    monkeypatch.setenv("KONTAK_IMPORT_WORKERS", "0")
    s = Settings.from_env()
    assert s.store == "memory"
    assert s.backup_dir == tmp_path
    assert s.unique_phone is True
    assert s.import_workers == 1


def test_invalid_store(monkeypatch):
    monkeypatch.setenv("KONTAK_STORE", "postgres")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_invalid_workers(monkeypatch):
    monkeypatch.setenv("KONTAK_IMPORT_WORKERS", "many")
    with pytest.raises(ValueError):
        Settings.from_env()
