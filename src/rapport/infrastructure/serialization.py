"""Plain-dict codecs for entities. Timestamps as ISO-8601 instants, enums by value."""

from datetime import datetime, timezone

from rapport.domain import Contact, Interaction, Suggestion


def datetime_to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def iso_to_datetime(s: str) -> datetime:
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _optional_iso(dt: datetime | None) -> str | None:
    return datetime_to_iso(dt) if dt is not None else None


def _optional_datetime(s: str | None) -> datetime | None:
    return iso_to_datetime(s) if s else None


def contact_to_dict(contact: Contact) -> dict:
    return {
        "id": contact.id,
        "name": contact.name,
        "company": contact.company,
        "role": contact.role,
        "email": contact.email,
        "linkedin_url": contact.linkedin_url,
        "notes": contact.notes,
        "relationship_type": contact.relationship_type.value,
        "engagement_frequency": contact.engagement_frequency.value,
        "linkedin_auto_sync": contact.linkedin_auto_sync,
        "sync_status": contact.sync_status.value,
        "last_contacted": _optional_iso(contact.last_contacted),
        "created_at": datetime_to_iso(contact.created_at),
    }


def contact_from_dict(data: dict) -> Contact:
    return Contact(
        id=data["id"],
        name=data["name"],
        company=data.get("company") or "",
        role=data.get("role") or "",
        email=data.get("email") or None,
        linkedin_url=data.get("linkedin_url") or None,
        notes=data.get("notes") or "",
        relationship_type=data.get("relationship_type") or "peer",
        engagement_frequency=data.get("engagement_frequency"),
        linkedin_auto_sync=bool(data.get("linkedin_auto_sync")),
        sync_status=data.get("sync_status") or "idle",
        last_contacted=_optional_datetime(data.get("last_contacted")),
        created_at=iso_to_datetime(data["created_at"]),
    )


def interaction_to_dict(interaction: Interaction) -> dict:
    return {
        "id": interaction.id,
        "contact_id": interaction.contact_id,
        "type": interaction.type.value,
        "timestamp": datetime_to_iso(interaction.timestamp),
        "notes": interaction.notes,
        "source": interaction.source.value,
        "auto_logged": interaction.auto_logged,
        "created_at": datetime_to_iso(interaction.created_at),
    }


def interaction_from_dict(data: dict) -> Interaction:
    return Interaction(
        id=data["id"],
        contact_id=data["contact_id"],
        type=data["type"],
        timestamp=iso_to_datetime(data["timestamp"]),
        notes=data.get("notes") or None,
        source=data.get("source") or "manual",
        auto_logged=bool(data.get("auto_logged")),
        created_at=iso_to_datetime(data["created_at"]),
    )


def suggestion_to_dict(suggestion: Suggestion) -> dict:
    return {
        "id": suggestion.id,
        "contact_id": suggestion.contact_id,
        "contact_name": suggestion.contact_name,
        "type": suggestion.type.value,
        "timestamp": datetime_to_iso(suggestion.timestamp),
        "notes": suggestion.notes,
        "detected_at": datetime_to_iso(suggestion.detected_at),
        "status": suggestion.status.value,
    }


def suggestion_from_dict(data: dict) -> Suggestion:
    return Suggestion(
        id=data["id"],
        contact_id=data["contact_id"],
        contact_name=data.get("contact_name") or "",
        type=data["type"],
        timestamp=iso_to_datetime(data["timestamp"]),
        notes=data.get("notes") or None,
        detected_at=iso_to_datetime(data["detected_at"]),
        status=data.get("status") or "pending",
    )
