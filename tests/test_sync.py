"""Sync orchestrator and scheduler. Detector and sleep are test doubles; no real time passes."""

import asyncio
from datetime import datetime, timedelta, timezone

from rapport.application import (
    ContactCreated,
    ContactInput,
    ContactService,
    InteractionService,
    SafeMode,
    SuggestionQueue,
    SyncOrchestrator,
    SyncOutcome,
    SyncScheduler,
)
from rapport.domain import Contact, DetectedInteraction, InteractionType, SyncStatus
from rapport.infrastructure import InMemoryRepository

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Detector:
    """Returns one linkedin candidate per contact, or raises when told to."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail = False
        self.extra: list[DetectedInteraction] = []
        self.gate: asyncio.Event | None = None
        self.statuses_seen: list[SyncStatus] = []
        self.repo: InMemoryRepository | None = None

    async def detect(self, contacts: list[Contact]) -> list[DetectedInteraction]:
        self.calls.append([c.id for c in contacts])
        if self.repo is not None:
            self.statuses_seen = [self.repo.get_contact(c.id).sync_status for c in contacts]
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("network unreachable")
        out = [
            DetectedInteraction(
                contact_id=c.id,
                contact_name=c.name,
                type=InteractionType.LINKEDIN,
                timestamp=NOW - timedelta(days=2),
                notes="Exchanged messages",
            )
            for c in contacts
        ]
        return out + self.extra


class _Notifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def notify(self, message: str) -> None:
        self.messages.append(message)


def _setup(safe_mode=lambda: False):
    repo = InMemoryRepository()
    contacts = ContactService(repo, clock=lambda: NOW)
    queue = SuggestionQueue(repo, clock=lambda: NOW)
    detector = _Detector()
    detector.repo = repo
    notifier = _Notifier()
    orchestrator = SyncOrchestrator(
        repo, detector, queue, safe_mode=safe_mode, notifier=notifier
    )
    return repo, contacts, queue, detector, notifier, orchestrator


def _linked(contacts: ContactService, name: str = "Ada") -> str:
    created = contacts.create_contact(
        ContactInput(
            name=name,
            linkedin_url=f"https://linkedin.com/in/{name.lower()}",
            linkedin_auto_sync=True,
        )
    )
    assert isinstance(created, ContactCreated)
    return created.contact_id


async def test_cycle_queues_suggestion_then_dismiss_leaves_nothing() -> None:
    repo, contacts, queue, detector, notifier, orchestrator = _setup()
    cid = _linked(contacts)

    report = await orchestrator.run_cycle()
    assert report.outcome is SyncOutcome.COMPLETED
    assert report.added == 1
    assert detector.statuses_seen == [SyncStatus.SYNCING]
    assert repo.get_contact(cid).sync_status is SyncStatus.ENABLED
    assert notifier.messages == ["Found 1 new LinkedIn interaction!"]

    pending = queue.pending()
    assert len(pending) == 1
    assert pending[0].contact_id == cid

    queue.dismiss(pending[0].id)
    assert queue.pending() == []
    assert repo.list_interactions() == []


async def test_failed_cycle_marks_error_then_recovers() -> None:
    repo, contacts, queue, detector, notifier, orchestrator = _setup()
    cid = _linked(contacts)

    detector.fail = True
    report = await orchestrator.run_cycle()
    assert report.outcome is SyncOutcome.FAILED
    assert report.contact_statuses == {cid: SyncStatus.ERROR}
    assert repo.get_contact(cid).sync_status is SyncStatus.ERROR
    assert queue.pending() == []
    assert notifier.messages == ["Failed to sync LinkedIn interactions"]

    detector.fail = False
    report = await orchestrator.run_cycle()
    assert report.outcome is SyncOutcome.COMPLETED
    assert repo.get_contact(cid).sync_status is SyncStatus.ENABLED


async def test_detector_called_once_for_whole_batch() -> None:
    _, contacts, _, detector, _, orchestrator = _setup()
    a = _linked(contacts, "Ada")
    b = _linked(contacts, "Bob")
    contacts.create_contact(ContactInput(name="NoSync"))

    await orchestrator.run_cycle()
    assert detector.calls == [[a, b]]


async def test_existing_interaction_and_pending_suggestion_suppress_candidates() -> None:
    repo, contacts, queue, detector, notifier, orchestrator = _setup()
    cid = _linked(contacts)
    InteractionService(repo, clock=lambda: NOW).log_interaction(
        cid, "linkedin", timestamp=NOW - timedelta(days=2, minutes=30)
    )

    report = await orchestrator.run_cycle()
    assert report.detected == 1
    assert report.added == 0
    assert queue.pending() == []
    assert notifier.messages == []

    other = _linked(contacts, "Bob")
    await orchestrator.run_cycle()
    await orchestrator.run_cycle()
    assert [s.contact_id for s in queue.pending()] == [other]


async def test_candidates_for_unknown_contacts_are_dropped() -> None:
    _, contacts, queue, detector, _, orchestrator = _setup()
    _linked(contacts)
    detector.extra = [
        DetectedInteraction(
            contact_id="ghost", contact_name="Ghost", type="linkedin", timestamp=NOW
        )
    ]
    report = await orchestrator.run_cycle()
    assert report.added == 1
    assert all(s.contact_id != "ghost" for s in queue.pending())


async def test_no_eligible_contacts_is_idle() -> None:
    _, contacts, _, detector, _, orchestrator = _setup()
    contacts.create_contact(ContactInput(name="Ada"))
    report = await orchestrator.run_cycle()
    assert report.outcome is SyncOutcome.IDLE
    assert detector.calls == []


async def test_safe_mode_suppresses_cycles_and_manual_triggers() -> None:
    safe_mode = SafeMode(enabled=True)
    repo, contacts, queue, detector, _, orchestrator = _setup(safe_mode)
    cid = _linked(contacts)

    assert (await orchestrator.run_cycle()).outcome is SyncOutcome.SUPPRESSED
    assert (await orchestrator.run_cycle(manual=True)).outcome is SyncOutcome.SUPPRESSED
    assert detector.calls == []
    assert repo.get_contact(cid).sync_status is SyncStatus.IDLE

    safe_mode.disable()
    assert (await orchestrator.run_cycle(manual=True)).outcome is SyncOutcome.COMPLETED


async def test_overlapping_cycle_is_skipped() -> None:
    _, contacts, queue, detector, _, orchestrator = _setup()
    _linked(contacts)
    detector.gate = asyncio.Event()

    first = asyncio.create_task(orchestrator.run_cycle())
    await asyncio.sleep(0)
    assert orchestrator.running

    second = await orchestrator.run_cycle(manual=True)
    assert second.outcome is SyncOutcome.SKIPPED

    detector.gate.set()
    assert (await first).outcome is SyncOutcome.COMPLETED
    assert len(detector.calls) == 1
    assert len(queue.pending()) == 1
    assert not orchestrator.running


class _VirtualSleep:
    """Stands in for asyncio.sleep: records the delay and waits until released."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._release = asyncio.Queue()

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await self._release.get()

    def tick(self) -> None:
        self._release.put_nowait(None)


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


async def test_scheduler_runs_immediately_then_every_interval() -> None:
    _, contacts, _, detector, _, orchestrator = _setup()
    _linked(contacts)
    sleep = _VirtualSleep()
    scheduler = SyncScheduler(orchestrator, interval_s=900, sleep=sleep)

    scheduler.start()
    await _settle()
    assert len(detector.calls) == 1
    assert sleep.delays == [900]

    sleep.tick()
    await _settle()
    assert len(detector.calls) == 2

    sleep.tick()
    await _settle()
    assert len(detector.calls) == 3

    await scheduler.stop()
    assert not scheduler.running


async def test_scheduler_skips_initial_run_without_eligible_contacts() -> None:
    _, _, _, detector, _, orchestrator = _setup()
    sleep = _VirtualSleep()
    scheduler = SyncScheduler(orchestrator, interval_s=900, sleep=sleep)

    scheduler.start()
    await _settle()
    assert detector.calls == []
    assert sleep.delays == [900]
    await scheduler.stop()


async def test_scheduler_survives_failed_cycles() -> None:
    repo, contacts, _, detector, _, orchestrator = _setup()
    cid = _linked(contacts)
    detector.fail = True
    sleep = _VirtualSleep()
    scheduler = SyncScheduler(orchestrator, interval_s=60, sleep=sleep)

    scheduler.start()
    await _settle()
    assert repo.get_contact(cid).sync_status is SyncStatus.ERROR
    assert scheduler.running

    detector.fail = False
    sleep.tick()
    await _settle()
    assert repo.get_contact(cid).sync_status is SyncStatus.ENABLED
    await scheduler.stop()


async def test_disabled_scheduler_does_not_start() -> None:
    _, _, _, _, _, orchestrator = _setup()
    scheduler = SyncScheduler(orchestrator, enabled=False, sleep=_VirtualSleep())
    scheduler.start()
    assert not scheduler.running
    await scheduler.stop()


async def test_manual_trigger_while_scheduled() -> None:
    _, contacts, queue, detector, _, orchestrator = _setup()
    _linked(contacts)
    sleep = _VirtualSleep()
    scheduler = SyncScheduler(orchestrator, interval_s=900, sleep=sleep)
    scheduler.start()
    await _settle()

    report = await scheduler.trigger()
    assert report.manual is True
    assert report.outcome is SyncOutcome.COMPLETED
    assert report.added == 0
    assert len(detector.calls) == 2
    assert len(queue.pending()) == 1
    await scheduler.stop()
