from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass

import anyio

from ..errors import StoreError, UpstreamError
from .episode_scheduler import EpisodeScheduler
from .models import Notification, ShowState
from .tracker import ShowTracker

_logger = logging.getLogger(__name__)


class WatchlistLookup(t.Protocol):
    """Read side of the watchlist document store."""

    async def users_tracking(self, show_id: str) -> t.Sequence[str]: ...


class NotificationSink(t.Protocol):
    """Persists a notification and pushes it to the user's connected clients."""

    async def deliver(self, user_id: str, notification: Notification) -> None: ...


@dataclass
class ProcessReport:
    processed: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0


class NotificationProcessor:
    """Turns due schedule entries into per-user notifications.

    A show is acknowledged (removed from the schedule) only after every
    notification for it went out; a failed delivery leaves it due for the
    next run, so users may see a duplicate but never miss one.
    """

    def __init__(
        self,
        scheduler: EpisodeScheduler,
        watchlist: WatchlistLookup,
        sink: NotificationSink,
        tracker: t.Optional[ShowTracker] = None,
    ) -> None:
        self._scheduler = scheduler
        self._watchlist = watchlist
        self._sink = sink
        self._tracker = tracker

    async def process_due(self) -> ProcessReport:
        report = ProcessReport()
        due = await self._scheduler.get_due_shows()
        if not due:
            return report

        _logger.info("Processing %d due notifications", len(due))
        for show_id in due:
            try:
                meta = await self._scheduler.load_show_meta(show_id)
            except StoreError as exc:
                _logger.error("Loading metadata for show %s failed; will retry next run: %s", show_id, exc)
                report.failed += 1
                continue
            if meta is None:
                await self._scheduler.remove_from_schedule(show_id)
                report.skipped += 1
                continue

            try:
                users = await self._watchlist.users_tracking(show_id)
                for user_id in users:
                    await self._sink.deliver(
                        user_id,
                        Notification(
                            user_id=user_id,
                            media_id=show_id,
                            title=meta.name or "TV Show",
                            message=f"{meta.next_ep or 'New episode'} is now available!",
                        ),
                    )
                    report.notified += 1
            except Exception:  # noqa: BLE001 - collaborator failure leaves the show due
                _logger.exception("Delivering notifications for show %s failed; will retry next run", show_id)
                report.failed += 1
                continue

            await self._scheduler.remove_from_schedule(show_id)
            report.processed += 1

            if self._tracker is not None:
                try:
                    await self._tracker.track(show_id)
                except UpstreamError as exc:
                    _logger.error("Failed to reschedule show %s: %s", show_id, exc)

        _logger.info("Finished processing notifications: %s", report)
        return report


class TBAProcessor:
    """Re-checks shows without a known air date and files any that now have one."""

    def __init__(self, scheduler: EpisodeScheduler, tracker: ShowTracker) -> None:
        self._scheduler = scheduler
        self._tracker = tracker

    async def process(self) -> t.Dict[ShowState, int]:
        counts: t.Dict[ShowState, int] = {}
        shows = await self._scheduler.get_tba_shows()
        if not shows:
            return counts

        _logger.info("Checking %d TBA shows for air dates", len(shows))
        for show_id in shows:
            try:
                state = await self._tracker.track(show_id)
            except UpstreamError as exc:
                _logger.error("Failed to check TBA show %s: %s", show_id, exc)
                continue
            counts[state] = counts.get(state, 0) + 1
            if state is ShowState.SCHEDULED:
                _logger.info("Moved show %s to main schedule", show_id)

        _logger.info("Finished checking TBA shows")
        return counts


class PeriodicRunner:
    """Runs an async job every ``interval_seconds`` until cancelled."""

    def __init__(self, name: str, job: t.Callable[[], t.Awaitable[t.Any]], interval_seconds: float) -> None:
        self.name = name
        self._job = job
        self._interval = interval_seconds

    async def run_once(self) -> None:
        try:
            await self._job()
        except Exception:  # noqa: BLE001 - keep the loop alive across failed runs
            _logger.exception("Periodic job %s failed", self.name)

    async def run(self) -> None:
        _logger.info("Periodic job %s scheduled every %.0fs", self.name, self._interval)
        while True:
            await self.run_once()
            await anyio.sleep(self._interval)
