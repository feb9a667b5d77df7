"""Stand-in LinkedIn interaction detector.

No real LinkedIn protocol is spoken. For each sync-eligible contact a random
draw decides whether to fabricate one of a few canned interactions. The random
source and the simulated latency are injectable so detection is reproducible
in tests.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from rapport.domain import Contact, DetectedInteraction, InteractionType
from rapport.domain.entities import utcnow

logger = logging.getLogger(__name__)

DEFAULT_DETECTION_CHANCE = 0.3
DEFAULT_LATENCY_S = 1.0


@dataclass(frozen=True)
class InteractionTemplate:
    type: InteractionType
    age: timedelta
    notes: str


DEFAULT_TEMPLATES = (
    InteractionTemplate(
        type=InteractionType.LINKEDIN,
        age=timedelta(days=2),
        notes="Exchanged messages about upcoming project collaboration",
    ),
    InteractionTemplate(
        type=InteractionType.LINKEDIN,
        age=timedelta(days=5),
        notes="Discussed industry trends and shared article",
    ),
)


class SimulatedLinkedInDetector:
    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        chance: float = DEFAULT_DETECTION_CHANCE,
        latency_s: float = DEFAULT_LATENCY_S,
        templates: tuple[InteractionTemplate, ...] = DEFAULT_TEMPLATES,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not 0.0 <= chance <= 1.0:
            raise ValueError("chance must be between 0 and 1")
        if not templates:
            raise ValueError("at least one template is required")
        self._rng = rng or random.Random()
        self._chance = chance
        self._latency_s = latency_s
        self._templates = templates
        self._clock = clock
        self._sleep = sleep

    async def detect(self, contacts: list[Contact]) -> list[DetectedInteraction]:
        if self._latency_s > 0:
            await self._sleep(self._latency_s)
        now = self._clock()
        detected: list[DetectedInteraction] = []
        for contact in contacts:
            if not contact.sync_eligible:
                continue
            if self._rng.random() >= self._chance:
                continue
            template = self._rng.choice(self._templates)
            detected.append(
                DetectedInteraction(
                    contact_id=contact.id,
                    contact_name=contact.name,
                    type=template.type,
                    timestamp=now - template.age,
                    notes=template.notes,
                )
            )
        logger.debug("Simulated detection: %d of %d contact(s)", len(detected), len(contacts))
        return detected
