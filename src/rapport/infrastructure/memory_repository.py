"""In-memory implementation of Repository (no DB)."""

from collections.abc import Iterable
from dataclasses import replace

from rapport.domain import Contact, Interaction, Suggestion, SyncStatus


class InMemoryRepository:
    """Stores contacts, interactions and suggestions in memory. Order preserved by insertion.
    Every mutation completes without yielding, so no reader sees half of one.
    """

    def __init__(self) -> None:
        self._contacts: dict[str, Contact] = {}
        self._interactions: dict[str, Interaction] = {}
        self._suggestions: dict[str, Suggestion] = {}

    # dicts keep insertion order; replacing a value keeps its slot

    def ping(self) -> bool:
        return True

    def add_contact(self, contact: Contact) -> None:
        if contact.id in self._contacts:
            return
        self._contacts[contact.id] = contact

    def get_contact(self, contact_id: str) -> Contact | None:
        return self._contacts.get(contact_id)

    def list_contacts(self) -> list[Contact]:
        return list(self._contacts.values())

    def update_contact(self, contact: Contact) -> bool:
        if contact.id not in self._contacts:
            return False
        self._contacts[contact.id] = contact
        return True

    def delete_contact(self, contact_id: str) -> bool:
        if self._contacts.pop(contact_id, None) is None:
            return False
        self._interactions = {
            iid: i for iid, i in self._interactions.items() if i.contact_id != contact_id
        }
        self._suggestions = {
            sid: s for sid, s in self._suggestions.items() if s.contact_id != contact_id
        }
        return True

    def set_sync_status(self, contact_ids: Iterable[str], status: SyncStatus) -> None:
        for contact_id in contact_ids:
            contact = self._contacts.get(contact_id)
            if contact is not None:
                self._contacts[contact_id] = replace(contact, sync_status=status)

    def add_interaction(self, interaction: Interaction) -> None:
        if interaction.id in self._interactions:
            return
        self._interactions[interaction.id] = interaction

    def delete_interaction(self, interaction_id: str) -> bool:
        return self._interactions.pop(interaction_id, None) is not None

    def list_interactions(self, contact_id: str | None = None) -> list[Interaction]:
        if contact_id is None:
            return list(self._interactions.values())
        return [i for i in self._interactions.values() if i.contact_id == contact_id]

    def add_suggestion(self, suggestion: Suggestion) -> None:
        if suggestion.id in self._suggestions:
            return
        self._suggestions[suggestion.id] = suggestion

    def get_suggestion(self, suggestion_id: str) -> Suggestion | None:
        return self._suggestions.get(suggestion_id)

    def update_suggestion(self, suggestion: Suggestion) -> bool:
        if suggestion.id not in self._suggestions:
            return False
        self._suggestions[suggestion.id] = suggestion
        return True

    def delete_suggestion(self, suggestion_id: str) -> bool:
        return self._suggestions.pop(suggestion_id, None) is not None

    def list_suggestions(self) -> list[Suggestion]:
        return list(self._suggestions.values())

    def accept_suggestion(self, suggestion_id: str, interaction: Interaction) -> bool:
        if suggestion_id not in self._suggestions:
            return False
        self._interactions[interaction.id] = interaction
        del self._suggestions[suggestion_id]
        return True
