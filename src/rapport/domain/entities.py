"""Domain entities: Contact, Interaction, Suggestion, and their closed value sets."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Return dt as a timezone-aware instant (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class RelationshipType(str, Enum):
    PEER = "peer"
    MENTOR = "mentor"
    CLIENT = "client"


class EngagementFrequency(str, Enum):
    """
    Target re-engagement cadence for a contact.
    UNSET is an explicit variant: a contact without a cadence is never compared.
    """

    UNSET = "unset"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUALLY = "biannually"
    ANNUALLY = "annually"

    @classmethod
    def parse(cls, value: "str | EngagementFrequency | None") -> "EngagementFrequency":
        """Coerce None/blank to UNSET. Raises ValueError for values outside the set."""
        if value is None:
            return cls.UNSET
        if isinstance(value, cls):
            return value
        cleaned = str(value).strip().lower()
        if not cleaned:
            return cls.UNSET
        return cls(cleaned)


class InteractionType(str, Enum):
    CALL = "call"
    COFFEE = "coffee"
    MESSAGE = "message"
    EMAIL = "email"
    LINKEDIN = "linkedin"


class InteractionSource(str, Enum):
    MANUAL = "manual"
    AUTO_DETECTED = "auto_detected"


class SyncStatus(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    ENABLED = "enabled"
    ERROR = "error"


class SuggestionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class Contact:
    """
    A person the user wants to stay in touch with.
    Interactions and suggestions reference a contact by id; the contact does not hold them.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = field(default="")
    company: str = ""
    role: str = ""
    email: str | None = None
    linkedin_url: str | None = None
    notes: str = ""
    relationship_type: RelationshipType = RelationshipType.PEER
    engagement_frequency: EngagementFrequency = EngagementFrequency.UNSET
    linkedin_auto_sync: bool = False
    sync_status: SyncStatus = SyncStatus.IDLE
    last_contacted: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Contact name must be non-empty.")
        object.__setattr__(
            self, "engagement_frequency", EngagementFrequency.parse(self.engagement_frequency)
        )
        object.__setattr__(self, "relationship_type", RelationshipType(self.relationship_type))
        object.__setattr__(self, "sync_status", SyncStatus(self.sync_status))
        object.__setattr__(self, "created_at", ensure_aware(self.created_at))
        if self.last_contacted is not None:
            object.__setattr__(self, "last_contacted", ensure_aware(self.last_contacted))

    @property
    def sync_eligible(self) -> bool:
        """Auto-sync only counts when there is a profile to look at."""
        return self.linkedin_auto_sync and bool((self.linkedin_url or "").strip())


@dataclass(frozen=True)
class Interaction:
    """
    A logged touchpoint with a contact. Never updated in place; the timestamp is fixed at creation.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    contact_id: str = ""
    type: InteractionType = InteractionType.CALL
    timestamp: datetime = field(default_factory=utcnow)
    notes: str | None = None
    source: InteractionSource = InteractionSource.MANUAL
    auto_logged: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.contact_id:
            raise ValueError("Interaction must reference a contact.")
        object.__setattr__(self, "type", InteractionType(self.type))
        object.__setattr__(self, "source", InteractionSource(self.source))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))
        object.__setattr__(self, "created_at", ensure_aware(self.created_at))


@dataclass(frozen=True)
class DetectedInteraction:
    """Candidate interaction observed on the external network, before review."""

    contact_id: str
    contact_name: str
    type: InteractionType
    timestamp: datetime
    notes: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", InteractionType(self.type))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))


@dataclass(frozen=True)
class Suggestion:
    """
    A detected interaction waiting for the user to accept, edit, or dismiss it.
    contact_name is denormalized for display.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    contact_id: str = ""
    contact_name: str = ""
    type: InteractionType = InteractionType.LINKEDIN
    timestamp: datetime = field(default_factory=utcnow)
    notes: str | None = None
    detected_at: datetime = field(default_factory=utcnow)
    status: SuggestionStatus = SuggestionStatus.PENDING

    def __post_init__(self):
        if not self.contact_id:
            raise ValueError("Suggestion must reference a contact.")
        object.__setattr__(self, "type", InteractionType(self.type))
        object.__setattr__(self, "status", SuggestionStatus(self.status))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))
        object.__setattr__(self, "detected_at", ensure_aware(self.detected_at))
