"""Duplicate detection for externally observed interactions.

Proximity, not equality: same contact, same type, and less than an hour apart.
Two real interactions of one type within the same hour collapse into one.
"""

from collections.abc import Iterable
from datetime import timedelta

from rapport.domain.entities import DetectedInteraction, Interaction, Suggestion

DUPLICATE_WINDOW = timedelta(hours=1)

# Anything carrying contact_id, type and timestamp can suppress a candidate.
Recorded = Interaction | Suggestion | DetectedInteraction


def is_duplicate(candidate: DetectedInteraction, existing: Iterable[Recorded]) -> bool:
    """True if any recorded interaction already covers the candidate."""
    for record in existing:
        if record.contact_id != candidate.contact_id:
            continue
        if record.type != candidate.type:
            continue
        if abs(record.timestamp - candidate.timestamp) < DUPLICATE_WINDOW:
            return True
    return False


def filter_new(
    candidates: Iterable[DetectedInteraction], existing: Iterable[Recorded]
) -> list[DetectedInteraction]:
    """Candidates not covered by an existing record, in their original order.
    A candidate that survives also suppresses later repeats within the same batch."""
    recorded: list[Recorded] = list(existing)
    survivors = []
    for candidate in candidates:
        if is_duplicate(candidate, recorded):
            continue
        survivors.append(candidate)
        recorded.append(candidate)
    return survivors
