"""Local durable store: one JSON blob, loaded at startup and rewritten on every mutation."""

import json
import logging
import os
from pathlib import Path

from rapport.application.errors import PersistenceError
from rapport.infrastructure.memory_repository import InMemoryRepository
from rapport.infrastructure.serialization import (
    contact_from_dict,
    contact_to_dict,
    interaction_from_dict,
    interaction_to_dict,
    suggestion_from_dict,
    suggestion_to_dict,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_NAME = "rapport-storage"
STORAGE_VERSION = 1


class JsonFileRepository(InMemoryRepository):
    """InMemoryRepository persisted to <directory>/<storage_name>.json.

    A write that fails rolls the in-memory state back and raises PersistenceError.
    A file that cannot be read back is discarded and the store starts empty.
    """

    def __init__(self, directory: str | Path, storage_name: str = DEFAULT_STORAGE_NAME) -> None:
        super().__init__()
        self._path = Path(directory) / f"{storage_name}.json"
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def ping(self) -> bool:
        return self._path.parent.is_dir()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            state = payload["state"]
            contacts = [contact_from_dict(c) for c in state.get("contacts", [])]
            interactions = [interaction_from_dict(i) for i in state.get("interactions", [])]
            suggestions = [suggestion_from_dict(s) for s in state.get("suggestions", [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Storage file %s is unreadable; starting empty", self._path, exc_info=True)
            self._reset_corrupt_file()
            return
        self._contacts = {c.id: c for c in contacts}
        self._interactions = {i.id: i for i in interactions}
        self._suggestions = {s.id: s for s in suggestions}
        logger.info(
            "Loaded %d contact(s), %d interaction(s), %d suggestion(s) from %s",
            len(contacts),
            len(interactions),
            len(suggestions),
            self._path,
        )

    def _reset_corrupt_file(self) -> None:
        try:
            self._path.replace(self._path.with_name(self._path.name + ".corrupt"))
        except OSError:
            logger.warning("Could not move aside corrupt storage file %s", self._path)

    def _save(self) -> None:
        payload = {
            "version": STORAGE_VERSION,
            "state": {
                "contacts": [contact_to_dict(c) for c in self._contacts.values()],
                "interactions": [interaction_to_dict(i) for i in self._interactions.values()],
                "suggestions": [suggestion_to_dict(s) for s in self._suggestions.values()],
            },
        }
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload), encoding="utf-8")
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not write {self._path}: {e}") from e

    def _mutate(self, operation, *args):
        """Run an in-memory mutation then persist; undo it if the write fails."""
        snapshot = (dict(self._contacts), dict(self._interactions), dict(self._suggestions))
        result = operation(*args)
        if result is False:
            return result
        try:
            self._save()
        except PersistenceError:
            self._contacts, self._interactions, self._suggestions = snapshot
            raise
        return result

    def add_contact(self, contact):
        return self._mutate(super().add_contact, contact)

    def update_contact(self, contact):
        return self._mutate(super().update_contact, contact)

    def delete_contact(self, contact_id):
        return self._mutate(super().delete_contact, contact_id)

    def set_sync_status(self, contact_ids, status):
        return self._mutate(super().set_sync_status, list(contact_ids), status)

    def add_interaction(self, interaction):
        return self._mutate(super().add_interaction, interaction)

    def delete_interaction(self, interaction_id):
        return self._mutate(super().delete_interaction, interaction_id)

    def add_suggestion(self, suggestion):
        return self._mutate(super().add_suggestion, suggestion)

    def update_suggestion(self, suggestion):
        return self._mutate(super().update_suggestion, suggestion)

    def delete_suggestion(self, suggestion_id):
        return self._mutate(super().delete_suggestion, suggestion_id)

    def accept_suggestion(self, suggestion_id, interaction):
        return self._mutate(super().accept_suggestion, suggestion_id, interaction)
