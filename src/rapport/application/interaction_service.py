"""Interaction log: insert, delete, and most-recent-first retrieval per contact."""

import logging
from collections.abc import Callable
from datetime import datetime

from rapport.application.dto import ContactNotFound, Invalid, InteractionLogged
from rapport.application.ports import Repository
from rapport.domain import Interaction, InteractionSource, InteractionType
from rapport.domain.entities import utcnow

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_LIMIT = 20


def most_recent_first(interactions: list[Interaction]) -> list[Interaction]:
    """Sort by timestamp descending. Stable: equal timestamps keep insertion order."""
    return sorted(interactions, key=lambda i: i.timestamp, reverse=True)


class InteractionService:
    def __init__(
        self,
        repository: Repository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository
        self._clock = clock

    def log_interaction(
        self,
        contact_id: str,
        interaction_type: str | InteractionType,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> InteractionLogged | ContactNotFound | Invalid:
        """Record a manual interaction. The timestamp defaults to now."""
        if self._repo.get_contact(contact_id) is None:
            return ContactNotFound(contact_id=contact_id)
        try:
            kind = InteractionType(str(interaction_type).strip().lower())
        except ValueError:
            return Invalid(reason=f"Unknown interaction type: {interaction_type}.")
        now = self._clock()
        interaction = Interaction(
            contact_id=contact_id,
            type=kind,
            timestamp=timestamp or now,
            notes=(notes or "").strip() or None,
            source=InteractionSource.MANUAL,
            created_at=now,
        )
        self._repo.add_interaction(interaction)
        logger.info("Logged %s interaction for contact %s", kind.value, contact_id)
        return InteractionLogged(interaction=interaction)

    def delete_interaction(self, interaction_id: str) -> bool:
        """Remove one interaction. Unknown ids are a no-op."""
        return self._repo.delete_interaction(interaction_id)

    def interactions_for(self, contact_id: str) -> list[Interaction]:
        return most_recent_first(self._repo.list_interactions(contact_id))

    def last_interaction(self, contact_id: str) -> Interaction | None:
        ordered = self.interactions_for(contact_id)
        return ordered[0] if ordered else None

    def recent_activity(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> list[Interaction]:
        """Activity feed across all contacts."""
        return most_recent_first(self._repo.list_interactions())[: max(limit, 0)]
