from kontak.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    ensure_contact_constraints,
)
from kontak.infrastructure.persistence.neo4j_source import Neo4jContactSource, open_neo4j_source

__all__ = [
    "Neo4jContactRepository",
    "Neo4jContactSource",
    "ensure_contact_constraints",
    "open_neo4j_source",
]
