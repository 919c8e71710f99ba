#!/usr/bin/env python3
"""Scheduled backup: snapshot every owner's contacts into backup storage.

Meant for cron, e.g. daily at 02:00:
    0 2 * * * cd /path/to/repo && python scripts/run_backup.py
Run from repo root with .env (NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD,
KONTAK_BACKUP_DIR). Pass owner ids as arguments to back up only those.
"""
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv  # noqa: E402
from neo4j import GraphDatabase  # noqa: E402

from kontak.application import BackupCreated, BackupService  # noqa: E402
from kontak.config import Settings  # noqa: E402
from kontak.infrastructure import (  # noqa: E402
    LocalBackupStorage,
    LoggingNotifier,
    Neo4jContactRepository,
)

load_dotenv(REPO_ROOT / ".env")

_FIND_OWNERS = """
MATCH (owner:Owner)-[:KNOWS]->(:Contact)
RETURN DISTINCT owner.id AS owner_id
"""


def main(argv: list[str]) -> int:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    settings = Settings.from_env()
    driver = GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )
    try:
        owners = argv
        if not owners:
            with driver.session() as session:
                owners = [r["owner_id"] for r in session.run(_FIND_OWNERS)]
        if not owners:
            print("No contacts to back up.")
            return 0

        failures = 0
        for owner_id in owners:
            service = BackupService(
                Neo4jContactRepository(driver, user_id=owner_id),
                LocalBackupStorage(settings.backup_dir, bucket=owner_id),
                LoggingNotifier(),
            )
            result = service.create_backup()
            if isinstance(result, BackupCreated):
                print(f"{owner_id}: {result.message} ({result.count} contacts)")
            else:
                failures += 1
                print(f"{owner_id}: backup failed: {result.error}", file=sys.stderr)
        return 1 if failures else 0
    except Exception as e:
        print(f"Backup run failed: {e}", file=sys.stderr)
        return 1
    finally:
        driver.close()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
