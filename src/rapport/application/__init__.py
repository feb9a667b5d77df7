"""Application layer: services, ports, and DTOs. Depends only on domain."""

from rapport.application.contact_service import ContactService
from rapport.application.dto import (
    ContactCreated,
    ContactInput,
    ContactNotFound,
    ContactSummary,
    ContactUpdated,
    DashboardCounts,
    Invalid,
    InteractionLogged,
    OnboardingProgress,
    ProfileData,
    SyncOutcome,
    SyncReport,
)
from rapport.application.errors import (
    PersistenceError,
    ProfileLookupError,
    ProfileNotFound,
    RapportError,
)
from rapport.application.interaction_service import InteractionService
from rapport.application.ports import (
    ContactRepository,
    InteractionDetector,
    InteractionRepository,
    Notifier,
    ProfileLookup,
    Repository,
    SuggestionRepository,
)
from rapport.application.suggestion_queue import SuggestionQueue
from rapport.application.sync import SafeMode, SyncOrchestrator, SyncScheduler

__all__ = [
    "ContactCreated",
    "ContactInput",
    "ContactNotFound",
    "ContactRepository",
    "ContactService",
    "ContactSummary",
    "ContactUpdated",
    "DashboardCounts",
    "Invalid",
    "InteractionDetector",
    "InteractionLogged",
    "InteractionRepository",
    "InteractionService",
    "Notifier",
    "OnboardingProgress",
    "PersistenceError",
    "ProfileData",
    "ProfileLookup",
    "ProfileLookupError",
    "ProfileNotFound",
    "RapportError",
    "Repository",
    "SafeMode",
    "SuggestionQueue",
    "SuggestionRepository",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncReport",
    "SyncScheduler",
]
