"""Data transfer objects and result types returned by the application services."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rapport.domain import Contact, DueStatus, Interaction, SyncStatus


@dataclass(frozen=True)
class ContactInput:
    """Raw contact fields as submitted by a form. Validated by ContactService."""

    name: str
    company: str = ""
    role: str = ""
    email: str | None = None
    linkedin_url: str | None = None
    notes: str = ""
    relationship_type: str = "peer"
    engagement_frequency: str | None = None
    linkedin_auto_sync: bool = False
    last_contacted: datetime | None = None


@dataclass(frozen=True)
class ContactCreated:
    contact_id: str
    name: str


@dataclass(frozen=True)
class ContactUpdated:
    contact_id: str
    name: str


@dataclass(frozen=True)
class ContactNotFound:
    contact_id: str


@dataclass(frozen=True)
class Invalid:
    reason: str


@dataclass(frozen=True)
class InteractionLogged:
    interaction: Interaction


@dataclass(frozen=True)
class ContactSummary:
    """A contact with its computed due status, as shown on the dashboard."""

    contact: Contact
    due_status: DueStatus
    last_interaction: Interaction | None = None
    days_since_contact: int | None = None


@dataclass(frozen=True)
class DashboardCounts:
    overdue: int = 0
    due_soon: int = 0
    on_track: int = 0
    no_frequency: int = 0
    total: int = 0


@dataclass(frozen=True)
class OnboardingProgress:
    current: int
    minimum: int
    maximum: int

    @property
    def can_proceed(self) -> bool:
        return self.current >= self.minimum

    @property
    def reached_max(self) -> bool:
        return self.current >= self.maximum


@dataclass(frozen=True)
class ProfileData:
    """Best-effort profile record used to pre-fill contact forms."""

    name: str = ""
    company: str = ""
    role: str = ""
    linkedin_url: str = ""
    location: str = ""
    bio: str = ""


class SyncOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"  # another cycle was already running
    SUPPRESSED = "suppressed"  # safe mode
    IDLE = "idle"  # no eligible contacts


@dataclass(frozen=True)
class SyncReport:
    outcome: SyncOutcome
    detected: int = 0
    added: int = 0
    contact_statuses: dict[str, SyncStatus] = field(default_factory=dict)
    error: str | None = None
    manual: bool = False
