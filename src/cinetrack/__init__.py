"""cinetrack

Caching and episode-scheduling core of a personal media watchlist: a
best-effort cache with bounded namespaces in front of TMDB, and an air-date
schedule for tracked shows, both over a Redis-compatible store.
"""

from .cache import BoundedIndexEvictor, CacheResult, CacheStatus, JSONCodec, KeyValueCache, ReadThroughCache
from .errors import CinetrackError, InvalidRequestError, StoreError, StoreUnavailableError, UpstreamError
from .scheduler import (
    EpisodeScheduler,
    NotificationProcessor,
    ScheduledShow,
    ShowMeta,
    ShowState,
    ShowTracker,
    TBAProcessor,
)
from .store import InMemoryStore, KeyValueStore, RedisStore
from .tmdb import MetadataService, TMDBClient
from .utils.config import AppConfig

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "RedisStore",
    "KeyValueCache",
    "BoundedIndexEvictor",
    "ReadThroughCache",
    "JSONCodec",
    "CacheResult",
    "CacheStatus",
    "EpisodeScheduler",
    "ShowTracker",
    "NotificationProcessor",
    "TBAProcessor",
    "ScheduledShow",
    "ShowMeta",
    "ShowState",
    "TMDBClient",
    "MetadataService",
    "AppConfig",
    "CinetrackError",
    "StoreError",
    "StoreUnavailableError",
    "UpstreamError",
    "InvalidRequestError",
]

__version__ = "0.1.0"
