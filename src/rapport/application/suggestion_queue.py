"""Review queue for detected interactions: add, edit, accept, dismiss."""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from rapport.application.ports import Repository
from rapport.domain import (
    DetectedInteraction,
    Interaction,
    InteractionSource,
    InteractionType,
    Suggestion,
    SuggestionStatus,
)
from rapport.domain.entities import ensure_aware, utcnow

logger = logging.getLogger(__name__)


class SuggestionQueue:
    """
    Holds pending suggestions. Accepting is the only way a suggestion becomes an interaction,
    and the repository applies it as one step.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository
        self._clock = clock

    def add(self, candidate: DetectedInteraction) -> Suggestion:
        """Queue a candidate as pending. Does not deduplicate."""
        suggestion = Suggestion(
            contact_id=candidate.contact_id,
            contact_name=candidate.contact_name,
            type=candidate.type,
            timestamp=candidate.timestamp,
            notes=candidate.notes,
            detected_at=self._clock(),
            status=SuggestionStatus.PENDING,
        )
        self._repo.add_suggestion(suggestion)
        return suggestion

    def edit(
        self,
        suggestion_id: str,
        *,
        interaction_type: str | InteractionType | None = None,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> Suggestion | None:
        """Change type, timestamp, or notes of a pending suggestion. None if it is gone."""
        current = self._repo.get_suggestion(suggestion_id)
        if current is None or current.status is not SuggestionStatus.PENDING:
            return None
        changes = {}
        if interaction_type is not None:
            changes["type"] = InteractionType(str(interaction_type).strip().lower())
        if timestamp is not None:
            changes["timestamp"] = ensure_aware(timestamp)
        if notes is not None:
            changes["notes"] = notes.strip() or None
        if not changes:
            return current
        edited = replace(current, **changes)
        if not self._repo.update_suggestion(edited):
            return None
        return edited

    def accept(self, suggestion_id: str) -> Interaction | None:
        """Turn the suggestion into an auto-logged interaction. None if already processed."""
        suggestion = self._repo.get_suggestion(suggestion_id)
        if suggestion is None or suggestion.status is not SuggestionStatus.PENDING:
            return None
        interaction = Interaction(
            contact_id=suggestion.contact_id,
            type=suggestion.type,
            timestamp=suggestion.timestamp,
            notes=suggestion.notes,
            source=InteractionSource.AUTO_DETECTED,
            auto_logged=True,
            created_at=self._clock(),
        )
        if not self._repo.accept_suggestion(suggestion_id, interaction):
            return None
        logger.info(
            "Accepted suggestion %s as interaction %s", suggestion_id, interaction.id
        )
        return interaction

    def dismiss(self, suggestion_id: str) -> bool:
        """Drop the suggestion without logging anything. Unknown ids are a no-op."""
        return self._repo.delete_suggestion(suggestion_id)

    def pending(self) -> list[Suggestion]:
        return [
            s
            for s in self._repo.list_suggestions()
            if s.status is SuggestionStatus.PENDING
        ]
