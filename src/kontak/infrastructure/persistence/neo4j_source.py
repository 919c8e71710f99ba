"""Read-only access to an external Neo4j contact store (source of import-external)."""

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from kontak.errors import StoreError

_FETCH_QUERY = """
MATCH (c:Contact)
RETURN c
ORDER BY c.name
"""


class Neo4jContactSource:
    """Every Contact node in the source database, regardless of owner."""

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def fetch_contacts(self) -> list[dict]:
        try:
            with self._driver.session() as session:
                return [dict(rec["c"]) for rec in session.run(_FETCH_QUERY)]
        except (Neo4jError, DriverError) as e:
            raise StoreError(str(e)) from e

    def close(self) -> None:
        self._driver.close()


def open_neo4j_source(url: str, key: str, user: str = "neo4j") -> Neo4jContactSource:
    """Connect to the source store with (user, key) as credentials."""
    url = (url or "").strip()
    if not url:
        raise StoreError("Source URL is required")
    try:
        driver = GraphDatabase.driver(url, auth=(user, key))
    except (DriverError, ValueError) as e:
        raise StoreError(f"Cannot connect to source: {e}") from e
    return Neo4jContactSource(driver)
