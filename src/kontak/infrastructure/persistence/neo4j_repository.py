"""Neo4j implementation of ContactRepository.
Graph: one Owner node per user; contacts are Contact nodes.
(owner:Owner {id: user_id})-[:KNOWS]->(c:Contact {owner_id: user_id, ...}).
owner_id is duplicated on the Contact so the phone constraint can be scoped per owner.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from neo4j.exceptions import ConstraintError, DriverError, Neo4jError

from kontak.domain import Contact
from kontak.errors import PhoneTaken, StoreError

logger = logging.getLogger(__name__)

_PHONE_CONSTRAINT_QUERY = """
CREATE CONSTRAINT contact_phone_unique IF NOT EXISTS
FOR (c:Contact) REQUIRE (c.owner_id, c.phone) IS NODE UNIQUE
"""

_CONTACT_ID_CONSTRAINT_QUERY = """
CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
FOR (c:Contact) REQUIRE c.id IS UNIQUE
"""

_OWNER_ID_CONSTRAINT_QUERY = """
CREATE CONSTRAINT owner_id_unique IF NOT EXISTS
FOR (o:Owner) REQUIRE o.id IS UNIQUE
"""

_ADD_MANY_QUERY = """
MERGE (owner:Owner {id: $user_id})
WITH owner
UNWIND $rows AS row
CREATE (c:Contact)
SET c = row
CREATE (owner)-[:KNOWS]->(c)
"""

_LIST_QUERY = """
MATCH (owner:Owner {id: $user_id})-[:KNOWS]->(c:Contact)
RETURN c
ORDER BY toLower(c.name), c.id
"""

_GET_QUERY = """
MATCH (owner:Owner {id: $user_id})-[:KNOWS]->(c:Contact {id: $id})
RETURN c
"""

_FIND_BY_PHONE_QUERY = """
MATCH (owner:Owner {id: $user_id})-[:KNOWS]->(c:Contact)
WHERE c.phone = $phone
RETURN c
LIMIT 1
"""

_UPDATE_QUERY = """
MATCH (owner:Owner {id: $user_id})-[:KNOWS]->(c:Contact {id: $id})
SET c.name = $name,
    c.phone = $phone,
    c.ewallet = $ewallet,
    c.email = $email,
    c.company = $company,
    c.notes = $notes
RETURN 1 AS ok
"""

_DELETE_QUERY = """
MATCH (owner:Owner {id: $user_id})-[:KNOWS]->(c:Contact {id: $id})
DETACH DELETE c
RETURN count(*) AS deleted
"""


def ensure_contact_constraints(driver, *, unique_phone: bool = False) -> None:
    """Create the owner and contact id constraints, and the per-owner phone constraint if asked."""
    with driver.session() as session:
        session.run(_OWNER_ID_CONSTRAINT_QUERY)
        session.run(_CONTACT_ID_CONSTRAINT_QUERY)
        if unique_phone:
            session.run(_PHONE_CONSTRAINT_QUERY)


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def contact_to_row(contact: Contact, user_id: str) -> dict:
    """Node properties for a contact. None values are left unset."""
    return {
        "id": contact.id,
        "owner_id": user_id,
        "name": contact.name,
        "phone": contact.phone,
        "ewallet": list(contact.ewallet),
        "email": contact.email,
        "company": contact.company,
        "notes": contact.notes,
        "created_at": contact.created_at.isoformat(),
    }


@contextmanager
def _store_errors(action: str, phone: str | None = None) -> Iterator[None]:
    try:
        yield
    except ConstraintError as e:
        if phone:
            raise PhoneTaken(phone) from e
        raise StoreError(f"{action}: {e}") from e
    except (Neo4jError, DriverError) as e:
        logger.warning("Neo4j %s failed: %s", action, e)
        raise StoreError(f"{action}: {e}") from e


class Neo4jContactRepository:
    """Stores contacts in Neo4j, scoped by user_id."""

    def __init__(self, driver: object, user_id: str = "default") -> None:
        self._driver = driver
        self._user_id = user_id

    def add(self, contact: Contact) -> None:
        with _store_errors("add contact", contact.phone):
            self._write(_ADD_MANY_QUERY, rows=[contact_to_row(contact, self._user_id)])

    def add_many(self, contacts: list[Contact]) -> None:
        if not contacts:
            return
        rows = [contact_to_row(c, self._user_id) for c in contacts]
        # A constraint hit on a bulk insert has no single phone to report.
        with _store_errors("insert contacts"):
            self._write(_ADD_MANY_QUERY, rows=rows)

    def get_by_id(self, contact_id: str) -> Contact | None:
        with _store_errors("get contact"), self._driver.session() as session:
            record = session.run(
                _GET_QUERY, user_id=self._user_id, id=contact_id
            ).single()
        if not record:
            return None
        return _record_to_contact(record)

    def list_all(self) -> list[Contact]:
        with _store_errors("list contacts"), self._driver.session() as session:
            result = session.run(_LIST_QUERY, user_id=self._user_id)
            return [_record_to_contact(rec) for rec in result]

    def find_by_phone(self, phone: str) -> Contact | None:
        with _store_errors("find contact by phone"), self._driver.session() as session:
            record = session.run(
                _FIND_BY_PHONE_QUERY, user_id=self._user_id, phone=phone
            ).single()
        if not record:
            return None
        return _record_to_contact(record)

    def update(self, contact: Contact) -> bool:
        with _store_errors("update contact", contact.phone), self._driver.session() as session:
            record = session.run(
                _UPDATE_QUERY,
                user_id=self._user_id,
                id=contact.id,
                name=contact.name,
                phone=contact.phone,
                ewallet=list(contact.ewallet),
                email=contact.email,
                company=contact.company,
                notes=contact.notes,
            ).single()
        return record is not None

    def delete(self, contact_id: str) -> bool:
        with _store_errors("delete contact"), self._driver.session() as session:
            record = session.run(
                _DELETE_QUERY, user_id=self._user_id, id=contact_id
            ).single()
        return bool(record and record["deleted"])

    def _write(self, query: str, **params) -> None:
        with self._driver.session() as session:
            session.run(query, user_id=self._user_id, **params).consume()


def _record_to_contact(record) -> Contact:
    c = record["c"]
    return Contact(
        id=c["id"],
        name=c.get("name") or "",
        phone=c.get("phone") or None,
        ewallet=tuple(c.get("ewallet") or ()),
        email=c.get("email"),
        company=c.get("company"),
        notes=c.get("notes"),
        created_at=_iso_to_datetime(c["created_at"]),
    )
