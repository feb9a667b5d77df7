"""Periodic detection of external interactions.

One cycle: mark eligible contacts syncing, ask the detector once for the whole
batch, drop candidates already on record, queue the rest as suggestions, then
mark the contacts enabled (or error if anything failed). A failed cycle never
raises past the orchestrator; it only leaves contacts marked error until the
next attempt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from rapport.application.dto import SyncOutcome, SyncReport
from rapport.application.ports import InteractionDetector, Notifier, Repository
from rapport.application.suggestion_queue import SuggestionQueue
from rapport.domain import Contact, SyncStatus, filter_new

logger = logging.getLogger(__name__)

# Reference interval between cycles: 15 minutes.
DEFAULT_SYNC_INTERVAL_S = 15 * 60


class SafeMode:
    """Global kill switch for sync. Read at every cycle and every manual trigger."""

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        if not self._enabled:
            logger.warning("Safe mode enabled: sync suppressed")
        self._enabled = True

    def disable(self) -> None:
        if self._enabled:
            logger.info("Safe mode disabled")
        self._enabled = False

    def __call__(self) -> bool:
        return self._enabled


class SyncOrchestrator:
    """Runs detection cycles. Skips a cycle if one is already in flight."""

    def __init__(
        self,
        repository: Repository,
        detector: InteractionDetector,
        queue: SuggestionQueue,
        *,
        safe_mode: Callable[[], bool] = lambda: False,
        notifier: Notifier | None = None,
    ) -> None:
        self._repo = repository
        self._detector = detector
        self._queue = queue
        self._safe_mode = safe_mode
        self._notifier = notifier
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def eligible_contacts(self) -> list[Contact]:
        return [c for c in self._repo.list_contacts() if c.sync_eligible]

    async def run_cycle(self, *, manual: bool = False) -> SyncReport:
        if self._safe_mode():
            logger.info("Sync suppressed by safe mode (manual=%s)", manual)
            return SyncReport(outcome=SyncOutcome.SUPPRESSED, manual=manual)
        if self._running:
            logger.info("Sync already in progress; skipping (manual=%s)", manual)
            return SyncReport(outcome=SyncOutcome.SKIPPED, manual=manual)

        self._running = True
        try:
            return await self._cycle(manual)
        finally:
            self._running = False

    async def _cycle(self, manual: bool) -> SyncReport:
        try:
            contacts = self.eligible_contacts()
        except Exception as exc:
            logger.exception("Sync could not load contacts")
            return SyncReport(outcome=SyncOutcome.FAILED, error=str(exc), manual=manual)
        if not contacts:
            return SyncReport(outcome=SyncOutcome.IDLE, manual=manual)

        contact_ids = [c.id for c in contacts]
        logger.info("Sync cycle started for %d contact(s) (manual=%s)", len(contact_ids), manual)
        try:
            self._repo.set_sync_status(contact_ids, SyncStatus.SYNCING)
            detected = await self._detector.detect(contacts)

            known = {c.id for c in self._repo.list_contacts()}
            candidates = [d for d in detected if d.contact_id in known]
            existing = [*self._repo.list_interactions(), *self._queue.pending()]
            fresh = filter_new(candidates, existing)
            for candidate in fresh:
                self._queue.add(candidate)

            self._repo.set_sync_status(contact_ids, SyncStatus.ENABLED)
        except Exception as exc:
            logger.exception("Sync cycle failed for %d contact(s)", len(contact_ids))
            self._mark_error(contact_ids)
            await self._notify("Failed to sync LinkedIn interactions")
            return SyncReport(
                outcome=SyncOutcome.FAILED,
                contact_statuses={cid: SyncStatus.ERROR for cid in contact_ids},
                error=str(exc),
                manual=manual,
            )

        logger.info(
            "Sync cycle completed: detected=%d added=%d", len(detected), len(fresh)
        )
        if fresh:
            plural = "s" if len(fresh) > 1 else ""
            await self._notify(f"Found {len(fresh)} new LinkedIn interaction{plural}!")
        return SyncReport(
            outcome=SyncOutcome.COMPLETED,
            detected=len(detected),
            added=len(fresh),
            contact_statuses={cid: SyncStatus.ENABLED for cid in contact_ids},
            manual=manual,
        )

    def _mark_error(self, contact_ids: list[str]) -> None:
        try:
            self._repo.set_sync_status(contact_ids, SyncStatus.ERROR)
        except Exception:
            logger.exception("Could not record sync error status")

    async def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.notify(message)
        except Exception:
            logger.exception("Notification failed: %s", message)


class SyncScheduler:
    """Background task driving the orchestrator: once at start (if anything is
    eligible), then every interval. `sleep` is injectable so tests control time."""

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        *,
        interval_s: float = DEFAULT_SYNC_INTERVAL_S,
        enabled: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._orchestrator = orchestrator
        self._interval_s = interval_s
        self._enabled = enabled
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task."""
        if not self._enabled:
            logger.info("Sync scheduler disabled")
            return
        if self._task is not None:
            logger.warning("Sync scheduler already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Started sync scheduler: interval_s=%s", self._interval_s)

    async def stop(self) -> None:
        """Cancel the background task. A cycle awaiting the detector is abandoned."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sync scheduler stopped")

    async def trigger(self) -> SyncReport:
        """Manual "sync now". Safe to call while the periodic task runs."""
        return await self._orchestrator.run_cycle(manual=True)

    async def _loop(self) -> None:
        try:
            if self._has_eligible():
                await self._tick()
            while True:
                await self._sleep(self._interval_s)
                await self._tick()
        except asyncio.CancelledError:
            logger.debug("Sync loop cancelled")
            raise

    def _has_eligible(self) -> bool:
        try:
            return bool(self._orchestrator.eligible_contacts())
        except Exception:
            logger.exception("Could not load contacts for initial sync")
            return False

    async def _tick(self) -> None:
        try:
            await self._orchestrator.run_cycle()
        except Exception:
            # run_cycle recovers its own failures; this guards the loop itself
            logger.exception("Sync cycle raised")
