"""Runtime settings read from the environment (.env is loaded by the entry points)."""

import os
from dataclasses import dataclass
from pathlib import Path

STORE_NEO4J = "neo4j"
STORE_MEMORY = "memory"


def _env(name: str, default: str) -> str:
    return (os.environ.get(name) or default).strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    store: str = STORE_NEO4J
    backup_dir: Path = Path("backups")
    unique_phone: bool = False
    import_workers: int = 4

    @classmethod
    def from_env(cls) -> "Settings":
        store = _env("KONTAK_STORE", STORE_NEO4J).lower()
        if store not in (STORE_NEO4J, STORE_MEMORY):
            raise ValueError(f"KONTAK_STORE must be '{STORE_NEO4J}' or '{STORE_MEMORY}', got {store!r}")
        try:
            workers = int(_env("KONTAK_IMPORT_WORKERS", "4"))
        except ValueError as e:
            raise ValueError("KONTAK_IMPORT_WORKERS must be an integer") from e
        return cls(
            neo4j_uri=_env("NEO4J_URI", cls.neo4j_uri),
            neo4j_user=_env("NEO4J_USER", cls.neo4j_user),
            neo4j_password=_env("NEO4J_PASSWORD", cls.neo4j_password),
            store=store,
            backup_dir=Path(_env("KONTAK_BACKUP_DIR", "backups")).expanduser(),
            unique_phone=_env_bool("KONTAK_UNIQUE_PHONE"),
            import_workers=max(1, workers),
        )
