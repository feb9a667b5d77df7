"""Infrastructure layer: concrete implementations of application ports."""

from rapport.infrastructure.detection import SimulatedLinkedInDetector
from rapport.infrastructure.json_repository import JsonFileRepository
from rapport.infrastructure.memory_repository import InMemoryRepository
from rapport.infrastructure.notifier import LoggingNotifier, TelegramNotifier
from rapport.infrastructure.persistence.neo4j_repository import (
    Neo4jRepository,
    ensure_constraints,
)
from rapport.infrastructure.profile_lookup import LixProfileLookup

__all__ = [
    "InMemoryRepository",
    "JsonFileRepository",
    "LixProfileLookup",
    "LoggingNotifier",
    "Neo4jRepository",
    "SimulatedLinkedInDetector",
    "TelegramNotifier",
    "ensure_constraints",
]
