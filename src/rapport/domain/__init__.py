"""Domain layer: entities, cadence rules, duplicate detection. No dependencies on outer layers."""

from rapport.domain.cadence import (
    DUE_SOON_RATIO,
    DUE_STATUS_PRIORITY,
    FREQUENCY_DAYS,
    ContactFilter,
    DueStatus,
    ReferenceFallback,
    days_since,
    due_status,
    is_due,
    last_interaction_for,
)
from rapport.domain.dedup import DUPLICATE_WINDOW, filter_new, is_duplicate
from rapport.domain.entities import (
    Contact,
    DetectedInteraction,
    EngagementFrequency,
    Interaction,
    InteractionSource,
    InteractionType,
    RelationshipType,
    Suggestion,
    SuggestionStatus,
    SyncStatus,
)

__all__ = [
    "DUE_SOON_RATIO",
    "DUE_STATUS_PRIORITY",
    "DUPLICATE_WINDOW",
    "FREQUENCY_DAYS",
    "Contact",
    "ContactFilter",
    "DetectedInteraction",
    "DueStatus",
    "EngagementFrequency",
    "Interaction",
    "InteractionSource",
    "InteractionType",
    "ReferenceFallback",
    "RelationshipType",
    "Suggestion",
    "SuggestionStatus",
    "SyncStatus",
    "days_since",
    "due_status",
    "filter_new",
    "is_due",
    "is_duplicate",
    "last_interaction_for",
]
