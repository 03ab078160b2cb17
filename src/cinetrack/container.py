from __future__ import annotations

import typing as t
from dataclasses import dataclass

import httpx

from .cache import BoundedIndexEvictor, KeyValueCache, ReadThroughCache
from .scheduler import EpisodeScheduler, ShowTracker
from .store import KeyValueStore, connect_store, create_store
from .tmdb import MetadataService, TMDBClient
from .utils.config import AppConfig


@dataclass
class Services:
    """Everything that shares the single store connection, wired once per process."""

    config: AppConfig
    store: KeyValueStore
    cache: KeyValueCache
    evictor: BoundedIndexEvictor
    tmdb: TMDBClient
    metadata: MetadataService
    scheduler: EpisodeScheduler
    tracker: ShowTracker

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        store: t.Optional[KeyValueStore] = None,
        tmdb_transport: t.Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Services":
        store = store or create_store(config.store)
        cache = KeyValueCache(store)
        evictor = BoundedIndexEvictor(cache)
        tmdb = TMDBClient.from_config(config.tmdb, transport=tmdb_transport)
        scheduler = EpisodeScheduler(store, config.scheduler)
        return cls(
            config=config,
            store=store,
            cache=cache,
            evictor=evictor,
            tmdb=tmdb,
            metadata=MetadataService(tmdb, ReadThroughCache(cache, evictor), config.cache),
            scheduler=scheduler,
            tracker=ShowTracker(scheduler, tmdb),
        )

    async def start(self) -> bool:
        return await connect_store(self.store)

    async def close(self) -> None:
        await self.tmdb.close()
        await self.store.close()
