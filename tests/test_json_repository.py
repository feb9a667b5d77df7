"""JsonFileRepository: save on every mutation, load at startup, reset on corruption."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from rapport.application import PersistenceError, SuggestionQueue
from rapport.domain import (
    Contact,
    DetectedInteraction,
    EngagementFrequency,
    Interaction,
    InteractionSource,
    InteractionType,
    RelationshipType,
    SyncStatus,
)
from rapport.infrastructure import JsonFileRepository

NOW = datetime(2025, 3, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)


def test_round_trip_preserves_instants_and_enums(tmp_path) -> None:
    repo = JsonFileRepository(tmp_path)
    contact = Contact(
        name="Ada",
        relationship_type=RelationshipType.CLIENT,
        engagement_frequency=EngagementFrequency.BIANNUALLY,
        linkedin_url="https://linkedin.com/in/ada",
        linkedin_auto_sync=True,
        last_contacted=NOW - timedelta(days=3),
        created_at=NOW,
    )
    repo.add_contact(contact)
    interaction = Interaction(
        contact_id=contact.id,
        type=InteractionType.COFFEE,
        timestamp=NOW - timedelta(hours=5, microseconds=7),
        source=InteractionSource.AUTO_DETECTED,
        auto_logged=True,
        created_at=NOW,
    )
    repo.add_interaction(interaction)
    repo.set_sync_status([contact.id], SyncStatus.ERROR)
    SuggestionQueue(repo, clock=lambda: NOW).add(
        DetectedInteraction(
            contact_id=contact.id, contact_name="Ada", type="linkedin", timestamp=NOW
        )
    )

    reloaded = JsonFileRepository(tmp_path)
    loaded = reloaded.get_contact(contact.id)
    assert loaded.relationship_type is RelationshipType.CLIENT
    assert loaded.engagement_frequency is EngagementFrequency.BIANNUALLY
    assert loaded.sync_status is SyncStatus.ERROR
    assert loaded.last_contacted == contact.last_contacted
    assert loaded.created_at == NOW
    assert reloaded.list_interactions(contact.id) == [interaction]
    [suggestion] = reloaded.list_suggestions()
    assert suggestion.timestamp == NOW
    assert suggestion.detected_at == NOW


def test_unset_frequency_round_trips(tmp_path) -> None:
    repo = JsonFileRepository(tmp_path)
    contact = Contact(name="Ada")
    repo.add_contact(contact)
    loaded = JsonFileRepository(tmp_path).get_contact(contact.id)
    assert loaded.engagement_frequency is EngagementFrequency.UNSET


def test_file_layout(tmp_path) -> None:
    repo = JsonFileRepository(tmp_path, "custom")
    repo.add_contact(Contact(name="Ada"))
    assert repo.path == tmp_path / "custom.json"
    payload = json.loads(repo.path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert len(payload["state"]["contacts"]) == 1
    assert payload["state"]["interactions"] == []


def test_delete_cascade_is_persisted(tmp_path) -> None:
    repo = JsonFileRepository(tmp_path)
    contact = Contact(name="Ada")
    repo.add_contact(contact)
    repo.add_interaction(Interaction(contact_id=contact.id))
    assert repo.delete_contact(contact.id) is True

    reloaded = JsonFileRepository(tmp_path)
    assert reloaded.list_contacts() == []
    assert reloaded.list_interactions() == []


def test_corrupt_file_resets_to_empty(tmp_path) -> None:
    path = tmp_path / "rapport-storage.json"
    path.write_text("{not json", encoding="utf-8")

    repo = JsonFileRepository(tmp_path)
    assert repo.list_contacts() == []
    assert (tmp_path / "rapport-storage.json.corrupt").exists()

    repo.add_contact(Contact(name="Ada"))
    assert len(JsonFileRepository(tmp_path).list_contacts()) == 1


def test_failed_write_rolls_back(tmp_path, monkeypatch) -> None:
    repo = JsonFileRepository(tmp_path)
    existing = Contact(name="Ada")
    repo.add_contact(existing)

    def _boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("rapport.infrastructure.json_repository.os.replace", _boom)
    with pytest.raises(PersistenceError):
        repo.add_contact(Contact(name="Bob"))
    assert repo.list_contacts() == [existing]
