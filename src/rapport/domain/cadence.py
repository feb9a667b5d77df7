"""Due-status computation: how a contact's cadence and history turn into an actionable status."""

from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import Enum

from rapport.domain.entities import Contact, EngagementFrequency, Interaction, ensure_aware


class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due-soon"
    ON_TRACK = "on-track"
    NO_FREQUENCY = "no-frequency"


class ReferenceFallback(str, Enum):
    """What to measure from when a contact has no interaction on record.

    NONE treats the contact as never contacted (always overdue). The other two
    use the contact's last_contacted field or its creation time.
    """

    NONE = "none"
    LAST_CONTACTED = "last_contacted"
    CREATED_AT = "created_at"


class ContactFilter(str, Enum):
    ALL = "all"
    DUE = "due"
    RECENT = "recent"


FREQUENCY_DAYS: dict[EngagementFrequency, int] = {
    EngagementFrequency.WEEKLY: 7,
    EngagementFrequency.BIWEEKLY: 14,
    EngagementFrequency.MONTHLY: 30,
    EngagementFrequency.QUARTERLY: 90,
    EngagementFrequency.BIANNUALLY: 180,
    EngagementFrequency.ANNUALLY: 365,
}

DUE_SOON_RATIO = 0.8

# Lower sorts first; no-frequency is always last.
DUE_STATUS_PRIORITY: dict[DueStatus, int] = {
    DueStatus.OVERDUE: 0,
    DueStatus.DUE_SOON: 1,
    DueStatus.ON_TRACK: 2,
    DueStatus.NO_FREQUENCY: 3,
}


def target_days(frequency: EngagementFrequency) -> int | None:
    return FREQUENCY_DAYS.get(frequency)


def last_interaction_for(
    contact_id: str, interactions: Iterable[Interaction]
) -> Interaction | None:
    """Most recent interaction for the contact by timestamp (earliest inserted wins a tie)."""
    latest: Interaction | None = None
    for interaction in interactions:
        if interaction.contact_id != contact_id:
            continue
        if latest is None or interaction.timestamp > latest.timestamp:
            latest = interaction
    return latest


def reference_point(
    contact: Contact,
    interactions: Iterable[Interaction],
    fallback: ReferenceFallback = ReferenceFallback.NONE,
) -> datetime | None:
    last = last_interaction_for(contact.id, interactions)
    if last is not None:
        return last.timestamp
    if fallback is ReferenceFallback.LAST_CONTACTED:
        return contact.last_contacted
    if fallback is ReferenceFallback.CREATED_AT:
        return contact.created_at
    return None


def days_since(reference: datetime, now: datetime) -> int:
    """Whole days elapsed, truncated."""
    return (ensure_aware(now) - ensure_aware(reference)) // timedelta(days=1)


def due_status(
    contact: Contact,
    interactions: Iterable[Interaction],
    now: datetime,
    *,
    fallback: ReferenceFallback = ReferenceFallback.NONE,
) -> DueStatus:
    """Classify the contact against its cadence at instant `now`.

    Thresholds are inclusive: a contact exactly at the target is overdue and
    exactly at 80% of it is due soon. Elapsed time is compared as an exact
    duration, which for whole-day thresholds is the same as comparing
    truncated days.
    """
    days = target_days(contact.engagement_frequency)
    if days is None:
        return DueStatus.NO_FREQUENCY

    reference = reference_point(contact, interactions, fallback)
    if reference is None:
        return DueStatus.OVERDUE

    elapsed = ensure_aware(now) - reference
    if elapsed >= timedelta(days=days):
        return DueStatus.OVERDUE
    if elapsed >= timedelta(days=days * DUE_SOON_RATIO):
        return DueStatus.DUE_SOON
    return DueStatus.ON_TRACK


def is_due(status: DueStatus) -> bool:
    return status in (DueStatus.OVERDUE, DueStatus.DUE_SOON)


def matches_filter(status: DueStatus, contact_filter: ContactFilter) -> bool:
    if contact_filter is ContactFilter.DUE:
        return is_due(status)
    if contact_filter is ContactFilter.RECENT:
        return status is DueStatus.ON_TRACK
    return True


def urgency_key(status: DueStatus) -> int:
    return DUE_STATUS_PRIORITY[status]
