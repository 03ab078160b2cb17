from __future__ import annotations

import logging

from ..utils.config import StoreConfig
from .base import InMemoryStore, KeyValueStore
from .redis_adapter import RedisStore

_logger = logging.getLogger(__name__)


def create_store(config: StoreConfig) -> KeyValueStore:
    """Build the store described by ``config``; no URL means a process-local store."""
    if config.url:
        return RedisStore.from_config(config)
    _logger.warning("REDIS_URL not set - using in-process store, cache is not shared")
    return InMemoryStore()


async def connect_store(store: KeyValueStore) -> bool:
    """Connect if the store needs it. Never raises; an unreachable store degrades."""
    if isinstance(store, RedisStore):
        return await store.connect()
    return store.is_available()
