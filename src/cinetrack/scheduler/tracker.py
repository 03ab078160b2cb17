from __future__ import annotations

import logging
import time
import typing as t

from .episode_scheduler import EpisodeScheduler
from .models import ShowId, ShowMeta, ShowState, episode_label, to_timestamp

_logger = logging.getLogger(__name__)

FINISHED_STATUSES = ("Ended", "Canceled")


class ShowSource(t.Protocol):
    async def fetch(self, endpoint: str, params: t.Optional[t.Mapping[str, t.Any]] = None) -> t.Dict[str, t.Any]: ...


class ShowTracker:
    """Keeps a show's schedule state in line with its TMDB details."""

    def __init__(
        self,
        scheduler: EpisodeScheduler,
        source: ShowSource,
        clock: t.Callable[[], float] = time.time,
    ) -> None:
        self._scheduler = scheduler
        self._source = source
        self._clock = clock

    async def sync_show(self, details: t.Mapping[str, t.Any], show_id: t.Optional[ShowId] = None) -> ShowState:
        sid = str(show_id if show_id is not None else details["id"])

        if details.get("status") in FINISHED_STATUSES:
            await self._scheduler.remove_from_schedule(sid)
            await self._scheduler.remove_from_tba(sid)
            return ShowState.ENDED

        next_episode = details.get("next_episode_to_air") or {}
        air_date = next_episode.get("air_date")
        if not air_date:
            await self._scheduler.add_to_tba(sid)
            return ShowState.TBA

        try:
            timestamp = to_timestamp(air_date)
        except ValueError:
            _logger.warning("Show %s has unparseable air date %r", sid, air_date)
            return ShowState.UNCHANGED
        if timestamp <= self._clock():
            return ShowState.UNCHANGED

        meta = ShowMeta(
            name=details.get("name") or "",
            next_ep=episode_label(next_episode.get("season_number"), next_episode.get("episode_number")),
        )
        if not await self._scheduler.schedule_episode(sid, timestamp, meta):
            return ShowState.UNCHANGED
        return ShowState.SCHEDULED

    async def track(self, show_id: ShowId) -> ShowState:
        """Fetch current details for a tracked TV show and file it. Upstream errors propagate."""
        details = await self._source.fetch(f"tv/{show_id}")
        state = await self.sync_show(details, show_id=show_id)
        _logger.debug("Show %s synced as %s", show_id, state.value)
        return state

    async def untrack(self, show_id: ShowId) -> None:
        await self._scheduler.forget(show_id)
