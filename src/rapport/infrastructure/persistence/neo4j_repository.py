"""Neo4j implementation of Repository.
Graph, scoped by owner (the user resolved by the identity provider):
(owner:Person {id: user_id, registered: true})-[:KNOWS]->(c:Contact)
(c)-[:HAD]->(i:Interaction)
(c)-[:HAS_SUGGESTION]->(s:Suggestion)
Interactions and suggestions hang off their contact so a contact delete can take them along.
Every created node takes the next value of owner.seq; listings order by it, so ties on
timestamps keep insertion order.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from neo4j.exceptions import DriverError, Neo4jError

from rapport.application.errors import PersistenceError
from rapport.domain import Contact, Interaction, Suggestion, SyncStatus
from rapport.infrastructure.serialization import (
    contact_from_dict,
    contact_to_dict,
    interaction_from_dict,
    interaction_to_dict,
    suggestion_from_dict,
    suggestion_to_dict,
)

_CONSTRAINT_QUERIES = (
    "CREATE CONSTRAINT contact_id_unique IF NOT EXISTS FOR (c:Contact) REQUIRE c.id IS UNIQUE",
    "CREATE CONSTRAINT interaction_id_unique IF NOT EXISTS FOR (i:Interaction) REQUIRE i.id IS UNIQUE",
    "CREATE CONSTRAINT suggestion_id_unique IF NOT EXISTS FOR (s:Suggestion) REQUIRE s.id IS UNIQUE",
)

_OWNER_CONTACTS = "MATCH (owner:Person {id: $user_id, registered: true})-[:KNOWS]->(c:Contact)"


def ensure_constraints(driver) -> None:
    """Create id uniqueness constraints if missing."""
    try:
        with driver.session() as session:
            for query in _CONSTRAINT_QUERIES:
                session.run(query)
    except (Neo4jError, DriverError) as e:
        raise PersistenceError(f"Neo4j constraint setup failed: {e}") from e


class Neo4jRepository:
    """Stores contacts, interactions and suggestions in Neo4j, scoped by user_id."""

    def __init__(self, driver: object, user_id: str = "default") -> None:
        self._driver = driver
        self._user_id = user_id

    @contextmanager
    def _session(self) -> Iterator:
        try:
            with self._driver.session() as session:
                yield session
        except (Neo4jError, DriverError) as e:
            raise PersistenceError(f"Neo4j request failed: {e}") from e

    def ping(self) -> bool:
        try:
            self._driver.verify_connectivity()
        except (Neo4jError, DriverError, OSError):
            return False
        return True

    # --- contacts ---

    def add_contact(self, contact: Contact) -> None:
        with self._session() as session:
            session.run(
                """
                MERGE (owner:Person {id: $user_id, registered: true})
                WITH owner, coalesce(owner.seq, 0) + 1 AS seq
                MERGE (c:Contact {id: $props.id})
                ON CREATE SET c += $props, c.seq = seq, owner.seq = seq
                MERGE (owner)-[:KNOWS]->(c)
                """,
                user_id=self._user_id,
                props=contact_to_dict(contact),
            )

    def get_contact(self, contact_id: str) -> Contact | None:
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS + " WHERE c.id = $id RETURN c",
                user_id=self._user_id,
                id=contact_id,
            ).single()
        if not record:
            return None
        return contact_from_dict(dict(record["c"]))

    def list_contacts(self) -> list[Contact]:
        with self._session() as session:
            result = session.run(
                _OWNER_CONTACTS + " RETURN c ORDER BY c.seq, c.created_at",
                user_id=self._user_id,
            )
            return [contact_from_dict(dict(rec["c"])) for rec in result]

    def update_contact(self, contact: Contact) -> bool:
        props = contact_to_dict(contact)
        props.pop("id")
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS + " WHERE c.id = $id SET c += $props RETURN 1 AS ok",
                user_id=self._user_id,
                id=contact.id,
                props=props,
            ).single()
        return record is not None

    def delete_contact(self, contact_id: str) -> bool:
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS
                + """
                WHERE c.id = $id
                OPTIONAL MATCH (c)-[:HAD]->(i:Interaction)
                OPTIONAL MATCH (c)-[:HAS_SUGGESTION]->(s:Suggestion)
                WITH c, collect(DISTINCT i) AS interactions, collect(DISTINCT s) AS suggestions
                FOREACH (n IN interactions | DETACH DELETE n)
                FOREACH (n IN suggestions | DETACH DELETE n)
                DETACH DELETE c
                RETURN 1 AS ok
                """,
                user_id=self._user_id,
                id=contact_id,
            ).single()
        return record is not None

    def set_sync_status(self, contact_ids: Iterable[str], status: SyncStatus) -> None:
        ids = list(contact_ids)
        if not ids:
            return
        with self._session() as session:
            session.run(
                _OWNER_CONTACTS + " WHERE c.id IN $ids SET c.sync_status = $status",
                user_id=self._user_id,
                ids=ids,
                status=SyncStatus(status).value,
            )

    # --- interactions ---

    def add_interaction(self, interaction: Interaction) -> None:
        with self._session() as session:
            session.run(
                _OWNER_CONTACTS
                + """
                WHERE c.id = $contact_id
                WITH owner, c, coalesce(owner.seq, 0) + 1 AS seq
                MERGE (i:Interaction {id: $props.id})
                ON CREATE SET i += $props, i.seq = seq, owner.seq = seq
                MERGE (c)-[:HAD]->(i)
                """,
                user_id=self._user_id,
                contact_id=interaction.contact_id,
                props=interaction_to_dict(interaction),
            )

    def delete_interaction(self, interaction_id: str) -> bool:
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS
                + """
                -[:HAD]->(i:Interaction {id: $id})
                DETACH DELETE i
                RETURN 1 AS ok
                """,
                user_id=self._user_id,
                id=interaction_id,
            ).single()
        return record is not None

    def list_interactions(self, contact_id: str | None = None) -> list[Interaction]:
        with self._session() as session:
            result = session.run(
                _OWNER_CONTACTS
                + """
                -[:HAD]->(i:Interaction)
                WHERE $contact_id IS NULL OR c.id = $contact_id
                RETURN i
                ORDER BY i.seq, i.created_at
                """,
                user_id=self._user_id,
                contact_id=contact_id,
            )
            return [interaction_from_dict(dict(rec["i"])) for rec in result]

    # --- suggestions ---

    def add_suggestion(self, suggestion: Suggestion) -> None:
        with self._session() as session:
            session.run(
                _OWNER_CONTACTS
                + """
                WHERE c.id = $contact_id
                WITH owner, c, coalesce(owner.seq, 0) + 1 AS seq
                MERGE (s:Suggestion {id: $props.id})
                ON CREATE SET s += $props, s.seq = seq, owner.seq = seq
                MERGE (c)-[:HAS_SUGGESTION]->(s)
                """,
                user_id=self._user_id,
                contact_id=suggestion.contact_id,
                props=suggestion_to_dict(suggestion),
            )

    def get_suggestion(self, suggestion_id: str) -> Suggestion | None:
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS + "-[:HAS_SUGGESTION]->(s:Suggestion {id: $id}) RETURN s",
                user_id=self._user_id,
                id=suggestion_id,
            ).single()
        if not record:
            return None
        return suggestion_from_dict(dict(record["s"]))

    def update_suggestion(self, suggestion: Suggestion) -> bool:
        props = suggestion_to_dict(suggestion)
        props.pop("id")
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS
                + "-[:HAS_SUGGESTION]->(s:Suggestion {id: $id}) SET s += $props RETURN 1 AS ok",
                user_id=self._user_id,
                id=suggestion.id,
                props=props,
            ).single()
        return record is not None

    def delete_suggestion(self, suggestion_id: str) -> bool:
        with self._session() as session:
            record = session.run(
                _OWNER_CONTACTS
                + "-[:HAS_SUGGESTION]->(s:Suggestion {id: $id}) DETACH DELETE s RETURN 1 AS ok",
                user_id=self._user_id,
                id=suggestion_id,
            ).single()
        return record is not None

    def list_suggestions(self) -> list[Suggestion]:
        with self._session() as session:
            result = session.run(
                _OWNER_CONTACTS
                + "-[:HAS_SUGGESTION]->(s:Suggestion) RETURN s ORDER BY s.seq, s.detected_at",
                user_id=self._user_id,
            )
            return [suggestion_from_dict(dict(rec["s"])) for rec in result]

    def accept_suggestion(self, suggestion_id: str, interaction: Interaction) -> bool:
        """Delete the suggestion and create the interaction in one write transaction."""

        def _accept(tx) -> bool:
            record = tx.run(
                _OWNER_CONTACTS
                + """
                -[:HAS_SUGGESTION]->(s:Suggestion {id: $suggestion_id})
                DETACH DELETE s
                WITH owner, c, coalesce(owner.seq, 0) + 1 AS seq
                CREATE (i:Interaction)
                SET i = $props
                SET i.seq = seq, owner.seq = seq
                CREATE (c)-[:HAD]->(i)
                RETURN i.id AS id
                """,
                user_id=self._user_id,
                suggestion_id=suggestion_id,
                props=interaction_to_dict(interaction),
            ).single()
            return record is not None

        with self._session() as session:
            return session.execute_write(_accept)
