from __future__ import annotations

import datetime as dt
import logging
import time
import typing as t

from ..errors import StoreError, StoreUnavailableError
from ..monitoring import metrics
from ..store import KeyValueStore
from ..utils.config import SchedulerConfig
from .models import AirDate, ScheduledShow, ShowId, ShowMeta, to_timestamp

_logger = logging.getLogger(__name__)


class EpisodeScheduler:
    """Upcoming-episode schedule for tracked shows.

    Dated shows live in a sorted set scored by air time (epoch seconds) with
    display metadata in a per-show hash; shows without a known date live in
    the TBA set. A show is moved, never copied, between the two. Due shows
    stay scheduled until the caller acknowledges them with
    `remove_from_schedule`, so a crash before acknowledgment reports them
    again on the next poll.

    Every operation degrades to ``False`` / ``[]`` / ``None`` when the store
    is unreachable; the watchlist records remain the source of truth.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: t.Optional[SchedulerConfig] = None,
        clock: t.Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._config = config or SchedulerConfig()
        self._clock = clock

    def is_available(self) -> bool:
        return self._store.is_available()

    def _meta_key(self, show_id: str) -> str:
        return f"{self._config.meta_key_prefix}:{show_id}"

    def _failed(self, op: str, exc: Exception) -> None:
        _logger.error("Scheduler %s error: %s", op, exc)
        metrics.schedule_operations_total.inc(op=op, outcome="error")

    async def schedule_episode(
        self,
        show_id: ShowId,
        air_date: AirDate,
        metadata: t.Union[ShowMeta, t.Mapping[str, str], None] = None,
    ) -> bool:
        if not self.is_available():
            return False
        sid = str(show_id)
        if metadata is None:
            meta = ShowMeta()
        elif isinstance(metadata, ShowMeta):
            meta = metadata
        else:
            meta = ShowMeta.from_hash(metadata)
        try:
            timestamp = to_timestamp(air_date)
        except (TypeError, ValueError, OverflowError) as exc:
            self._failed("scheduleEpisode", exc)
            return False
        try:
            await self._store.srem(self._config.tba_key, sid)
            await self._store.zadd(self._config.schedule_key, {sid: timestamp})
            await self._store.hset(self._meta_key(sid), meta.to_hash())
        except StoreError as exc:
            self._failed("scheduleEpisode", exc)
            return False
        metrics.schedule_operations_total.inc(op="scheduleEpisode", outcome="ok")
        return True

    async def add_to_tba(self, show_id: ShowId) -> bool:
        if not self.is_available():
            return False
        sid = str(show_id)
        try:
            await self._store.zrem(self._config.schedule_key, sid)
            await self._store.sadd(self._config.tba_key, sid)
        except StoreError as exc:
            self._failed("addToTBA", exc)
            return False
        metrics.schedule_operations_total.inc(op="addToTBA", outcome="ok")
        return True

    async def remove_from_tba(self, show_id: ShowId) -> None:
        if not self.is_available():
            return
        try:
            await self._store.srem(self._config.tba_key, str(show_id))
        except StoreError as exc:
            self._failed("removeFromTBA", exc)

    async def remove_from_schedule(self, show_id: ShowId) -> None:
        if not self.is_available():
            return
        try:
            await self._store.zrem(self._config.schedule_key, str(show_id))
        except StoreError as exc:
            self._failed("removeFromSchedule", exc)

    async def forget(self, show_id: ShowId) -> None:
        """Drop every trace of a show: schedule entry, TBA membership and metadata."""
        if not self.is_available():
            return
        sid = str(show_id)
        try:
            await self._store.zrem(self._config.schedule_key, sid)
            await self._store.srem(self._config.tba_key, sid)
            await self._store.delete(self._meta_key(sid))
        except StoreError as exc:
            self._failed("forget", exc)

    async def get_due_shows(self) -> t.List[str]:
        if not self.is_available():
            return []
        try:
            return await self._store.zrangebyscore(self._config.schedule_key, 0, int(self._clock()))
        except StoreError as exc:
            self._failed("getDueShows", exc)
            return []

    async def get_all_scheduled(self) -> t.List[ScheduledShow]:
        if not self.is_available():
            return []
        try:
            rows = await self._store.zrange(self._config.schedule_key, 0, -1, withscores=True)
        except StoreError as exc:
            self._failed("getAllScheduled", exc)
            return []
        scheduled = []
        for member, score in rows:
            try:
                air_date = dt.datetime.fromtimestamp(int(score), tz=dt.timezone.utc)
            except (ValueError, OverflowError, OSError) as exc:
                _logger.warning("Skipping show %s with unusable air time %r: %s", member, score, exc)
                continue
            scheduled.append(ScheduledShow(show_id=member, air_date=air_date))
        return scheduled

    async def get_tba_shows(self) -> t.List[str]:
        if not self.is_available():
            return []
        try:
            return sorted(await self._store.smembers(self._config.tba_key))
        except StoreError as exc:
            self._failed("getTBAShows", exc)
            return []

    async def load_show_meta(self, show_id: ShowId) -> t.Optional[ShowMeta]:
        """Metadata for ``show_id``, None only when the hash is confirmed absent.

        Unlike `get_show_meta` this raises `StoreError` when the store cannot
        answer, so callers can tell "no metadata" from "could not read it".
        """
        if not self.is_available():
            raise StoreUnavailableError("scheduler store unavailable")
        data = await self._store.hgetall(self._meta_key(str(show_id)))
        if not data:
            return None
        return ShowMeta.from_hash(data)

    async def get_show_meta(self, show_id: ShowId) -> t.Optional[ShowMeta]:
        if not self.is_available():
            return None
        try:
            return await self.load_show_meta(show_id)
        except StoreError as exc:
            self._failed("getShowMeta", exc)
            return None

    async def snapshot(self) -> t.Dict[str, t.Any]:
        """Diagnostic view of the whole schedule."""
        scheduled = await self.get_all_scheduled()
        return {
            "scheduled": [entry.to_dict() for entry in scheduled],
            "due": await self.get_due_shows(),
            "tba": await self.get_tba_shows(),
            "storeAvailable": self.is_available(),
        }
