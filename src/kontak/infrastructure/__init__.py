"""Infrastructure layer: concrete implementations of application ports."""

from kontak.infrastructure.memory_repository import InMemoryContactRepository
from kontak.infrastructure.notifier import LoggingNotifier
from kontak.infrastructure.operation_guard import OperationGuard
from kontak.infrastructure.persistence import (
    Neo4jContactRepository,
    Neo4jContactSource,
    ensure_contact_constraints,
    open_neo4j_source,
)
from kontak.infrastructure.storage import LocalBackupStorage

__all__ = [
    "InMemoryContactRepository",
    "LocalBackupStorage",
    "LoggingNotifier",
    "Neo4jContactRepository",
    "Neo4jContactSource",
    "OperationGuard",
    "ensure_contact_constraints",
    "open_neo4j_source",
]
