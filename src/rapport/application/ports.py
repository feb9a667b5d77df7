"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Iterable
from typing import Protocol

from rapport.application.dto import ProfileData
from rapport.domain import Contact, DetectedInteraction, Interaction, Suggestion, SyncStatus


class ContactRepository(Protocol):
    """Persists contacts."""

    def add_contact(self, contact: Contact) -> None:
        ...

    def get_contact(self, contact_id: str) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def list_contacts(self) -> list[Contact]:
        """Return all contacts in creation order."""
        ...

    def update_contact(self, contact: Contact) -> bool:
        """Replace the stored contact with the same id. Returns False if not found."""
        ...

    def delete_contact(self, contact_id: str) -> bool:
        """Remove the contact and, in the same step, every interaction and suggestion referencing it.
        Returns False if there was nothing to delete."""
        ...

    def set_sync_status(self, contact_ids: Iterable[str], status: SyncStatus) -> None:
        """Set sync status on each listed contact. Unknown ids are ignored."""
        ...


class InteractionRepository(Protocol):
    """Persists interactions. Never updates one in place."""

    def add_interaction(self, interaction: Interaction) -> None:
        ...

    def delete_interaction(self, interaction_id: str) -> bool:
        """Remove one interaction. Returns False if not found."""
        ...

    def list_interactions(self, contact_id: str | None = None) -> list[Interaction]:
        """Return interactions in insertion order, optionally only those of one contact."""
        ...


class SuggestionRepository(Protocol):
    """Persists pending suggestions. Accepted and dismissed ones are removed, not kept."""

    def add_suggestion(self, suggestion: Suggestion) -> None:
        ...

    def get_suggestion(self, suggestion_id: str) -> Suggestion | None:
        ...

    def update_suggestion(self, suggestion: Suggestion) -> bool:
        ...

    def delete_suggestion(self, suggestion_id: str) -> bool:
        ...

    def list_suggestions(self) -> list[Suggestion]:
        """Return suggestions in insertion (detection) order."""
        ...

    def accept_suggestion(self, suggestion_id: str, interaction: Interaction) -> bool:
        """Insert the interaction and remove the suggestion as one step.
        Returns False, changing nothing, if the suggestion does not exist."""
        ...


class Repository(ContactRepository, InteractionRepository, SuggestionRepository, Protocol):
    """The whole persistence boundary."""

    def ping(self) -> bool:
        """True if the backing store is reachable."""
        ...


class InteractionDetector(Protocol):
    """Observes the external network for interactions with sync-enabled contacts."""

    async def detect(self, contacts: list[Contact]) -> list[DetectedInteraction]:
        """One batch call for all given contacts. May be slow, may raise."""
        ...


class ProfileLookup(Protocol):
    async def lookup(
        self,
        linkedin_url: str | None = None,
        *,
        name: str | None = None,
        company: str | None = None,
    ) -> ProfileData:
        """Raises ProfileNotFound or ProfileLookupError."""
        ...


class Notifier(Protocol):
    async def notify(self, message: str) -> None:
        ...
