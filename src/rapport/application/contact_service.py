"""Contact create, edit, delete, and list with due status."""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from rapport.application.dto import (
    ContactCreated,
    ContactInput,
    ContactNotFound,
    ContactSummary,
    ContactUpdated,
    DashboardCounts,
    Invalid,
    OnboardingProgress,
)
from rapport.application.ports import Repository
from rapport.domain import (
    Contact,
    ContactFilter,
    DueStatus,
    EngagementFrequency,
    ReferenceFallback,
    RelationshipType,
    days_since,
    due_status,
    last_interaction_for,
)
from rapport.domain.cadence import matches_filter, reference_point, urgency_key
from rapport.domain.entities import ensure_aware, utcnow

logger = logging.getLogger(__name__)

ONBOARDING_MIN_CONTACTS = 5
ONBOARDING_MAX_CONTACTS = 10

_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "company",
        "role",
        "email",
        "linkedin_url",
        "notes",
        "relationship_type",
        "engagement_frequency",
        "linkedin_auto_sync",
        "last_contacted",
    }
)


def _clean_optional(value: str | None) -> str | None:
    return (value or "").strip() or None


def _validated_fields(fields: dict[str, Any]) -> dict[str, Any] | Invalid:
    """Normalize raw form fields. Returns the cleaned dict or Invalid."""
    out: dict[str, Any] = {}
    for key, value in fields.items():
        if key not in _EDITABLE_FIELDS:
            return Invalid(reason=f"Unknown field: {key}.")
        if key == "name":
            name = (value or "").strip()
            if not name:
                return Invalid(reason="Name is required.")
            out[key] = name
        elif key in ("company", "role", "notes"):
            out[key] = (value or "").strip()
        elif key in ("email", "linkedin_url"):
            out[key] = _clean_optional(value)
        elif key == "relationship_type":
            try:
                out[key] = RelationshipType(str(value).strip().lower())
            except ValueError:
                return Invalid(reason=f"Unknown relationship type: {value}.")
        elif key == "engagement_frequency":
            try:
                out[key] = EngagementFrequency.parse(value)
            except ValueError:
                return Invalid(reason=f"Unknown engagement frequency: {value}.")
        elif key == "linkedin_auto_sync":
            out[key] = bool(value)
        elif key == "last_contacted":
            out[key] = ensure_aware(value) if isinstance(value, datetime) else None
    return out


class ContactService:
    """Contact lifecycle plus the due-status views built on the interaction history."""

    def __init__(
        self,
        repository: Repository,
        *,
        clock: Callable[[], datetime] = utcnow,
        fallback: ReferenceFallback = ReferenceFallback.NONE,
    ) -> None:
        self._repo = repository
        self._clock = clock
        self._fallback = fallback

    def create_contact(self, data: ContactInput) -> ContactCreated | Invalid:
        fields = _validated_fields(
            {
                "name": data.name,
                "company": data.company,
                "role": data.role,
                "email": data.email,
                "linkedin_url": data.linkedin_url,
                "notes": data.notes,
                "relationship_type": data.relationship_type,
                "engagement_frequency": data.engagement_frequency,
                "linkedin_auto_sync": data.linkedin_auto_sync,
                "last_contacted": data.last_contacted,
            }
        )
        if isinstance(fields, Invalid):
            return fields
        if not fields.get("linkedin_url"):
            fields["linkedin_auto_sync"] = False
        contact = Contact(created_at=self._clock(), **fields)
        self._repo.add_contact(contact)
        logger.info("Created contact %s", contact.id)
        return ContactCreated(contact_id=contact.id, name=contact.name)

    def update_contact(
        self, contact_id: str, **changes: Any
    ) -> ContactUpdated | ContactNotFound | Invalid:
        """Apply a partial edit. Only the given fields change."""
        existing = self._repo.get_contact(contact_id)
        if existing is None:
            return ContactNotFound(contact_id=contact_id)
        fields = _validated_fields(changes)
        if isinstance(fields, Invalid):
            return fields
        updated = replace(existing, **fields)
        if not updated.linkedin_url and updated.linkedin_auto_sync:
            updated = replace(updated, linkedin_auto_sync=False)
        if not self._repo.update_contact(updated):
            return ContactNotFound(contact_id=contact_id)
        return ContactUpdated(contact_id=updated.id, name=updated.name)

    def delete_contact(self, contact_id: str) -> bool:
        """Delete the contact with its interactions and suggestions. Unknown ids are a no-op."""
        deleted = self._repo.delete_contact(contact_id)
        if deleted:
            logger.info("Deleted contact %s", contact_id)
        return deleted

    def get_contact(self, contact_id: str) -> ContactSummary | None:
        contact = self._repo.get_contact(contact_id)
        if contact is None:
            return None
        return self._summarize(contact, self._repo.list_interactions(contact_id), self._clock())

    def due_status(self, contact_id: str) -> DueStatus | None:
        contact = self._repo.get_contact(contact_id)
        if contact is None:
            return None
        return due_status(
            contact,
            self._repo.list_interactions(contact_id),
            self._clock(),
            fallback=self._fallback,
        )

    def list_contacts(
        self, contact_filter: ContactFilter = ContactFilter.ALL
    ) -> list[ContactSummary]:
        """Contacts matching the filter, most urgent first. Equal urgency keeps creation order."""
        now = self._clock()
        interactions = self._repo.list_interactions()
        summaries = [
            self._summarize(contact, interactions, now)
            for contact in self._repo.list_contacts()
        ]
        kept = [s for s in summaries if matches_filter(s.due_status, contact_filter)]
        return sorted(kept, key=lambda s: urgency_key(s.due_status))

    def dashboard(self) -> DashboardCounts:
        summaries = self.list_contacts()
        counts = {status: 0 for status in DueStatus}
        for s in summaries:
            counts[s.due_status] += 1
        return DashboardCounts(
            overdue=counts[DueStatus.OVERDUE],
            due_soon=counts[DueStatus.DUE_SOON],
            on_track=counts[DueStatus.ON_TRACK],
            no_frequency=counts[DueStatus.NO_FREQUENCY],
            total=len(summaries),
        )

    def onboarding_progress(self) -> OnboardingProgress:
        return OnboardingProgress(
            current=len(self._repo.list_contacts()),
            minimum=ONBOARDING_MIN_CONTACTS,
            maximum=ONBOARDING_MAX_CONTACTS,
        )

    def _summarize(self, contact: Contact, interactions, now: datetime) -> ContactSummary:
        interactions = list(interactions)
        status = due_status(contact, interactions, now, fallback=self._fallback)
        reference = reference_point(contact, interactions, self._fallback)
        return ContactSummary(
            contact=contact,
            due_status=status,
            last_interaction=last_interaction_for(contact.id, interactions),
            days_since_contact=days_since(reference, now) if reference else None,
        )
