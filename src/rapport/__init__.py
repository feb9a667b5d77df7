"""
Rapport core: clean-architecture layout.

- domain: entities (Contact, Interaction, Suggestion), cadence and dedup rules. No outer dependencies.
- application: services (contacts, interactions, suggestion queue, sync), ports, DTOs.
- infrastructure: adapters (in-memory, JSON file and Neo4j stores, detector, profile lookup, notifiers).
"""

from rapport.application import (
    ContactService,
    InteractionService,
    Repository,
    SafeMode,
    SuggestionQueue,
    SyncOrchestrator,
    SyncScheduler,
)
from rapport.domain import (
    Contact,
    DetectedInteraction,
    DueStatus,
    EngagementFrequency,
    Interaction,
    InteractionType,
    Suggestion,
    SyncStatus,
    due_status,
    is_duplicate,
)
from rapport.infrastructure import InMemoryRepository, JsonFileRepository, Neo4jRepository

__version__ = "1.0.0"

__all__ = [
    "Contact",
    "ContactService",
    "DetectedInteraction",
    "DueStatus",
    "EngagementFrequency",
    "InMemoryRepository",
    "Interaction",
    "InteractionService",
    "InteractionType",
    "JsonFileRepository",
    "Neo4jRepository",
    "Repository",
    "SafeMode",
    "Suggestion",
    "SuggestionQueue",
    "SyncOrchestrator",
    "SyncScheduler",
    "SyncStatus",
    "due_status",
    "is_duplicate",
]
