from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class StoreConfig:
    url: Optional[str] = None  # None -> in-memory store, caching is process-local
    prefix: str = ""
    timeout_seconds: float = 5.0
    connect_attempts: int = 3
    connect_backoff_ms: List[int] = dataclasses.field(default_factory=lambda: [100, 500, 2000])
    failure_threshold: int = 3
    reset_timeout_seconds: float = 30.0


@dataclass
class CacheTTLs:
    discover: int = 6 * 60 * 60
    search: int = 60 * 60
    details: int = 60 * 60
    recommendations: int = 6 * 60 * 60
    images: int = 24 * 60 * 60
    season: int = 6 * 60 * 60
    providers: int = 24 * 60 * 60


@dataclass
class CacheLimits:
    search: int = 1000
    details: int = 500
    recommendations: int = 200


@dataclass
class CacheConfig:
    ttl: CacheTTLs = dataclasses.field(default_factory=CacheTTLs)
    limits: CacheLimits = dataclasses.field(default_factory=CacheLimits)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheConfig":
        return cls(
            ttl=CacheTTLs(**data.get("ttl", {})),
            limits=CacheLimits(**data.get("limits", {})),
        )


@dataclass
class SchedulerConfig:
    schedule_key: str = "schedule:episodes"
    tba_key: str = "schedule:tba"
    meta_key_prefix: str = "meta:show"
    due_interval_seconds: float = 12 * 60 * 60
    tba_interval_seconds: float = 7 * 24 * 60 * 60
    run_tba_processor: bool = False


@dataclass
class TMDBConfig:
    base_url: str = "https://api.themoviedb.org/3"
    api_token: Optional[str] = None
    timeout_seconds: float = 10.0


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3001


@dataclass
class AppConfig:
    store: StoreConfig = dataclasses.field(default_factory=StoreConfig)
    cache: CacheConfig = dataclasses.field(default_factory=CacheConfig)
    scheduler: SchedulerConfig = dataclasses.field(default_factory=SchedulerConfig)
    tmdb: TMDBConfig = dataclasses.field(default_factory=TMDBConfig)
    server: ServerConfig = dataclasses.field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        def build(dc_cls, key):
            values = data.get(key, {})
            return dc_cls(**values)

        return cls(
            store=build(StoreConfig, "store"),
            cache=CacheConfig.from_dict(data.get("cache", {})),
            scheduler=build(SchedulerConfig, "scheduler"),
            tmdb=build(TMDBConfig, "tmdb"),
            server=build(ServerConfig, "server"),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        config = cls()
        config.store.url = env.get("REDIS_URL") or None
        config.store.prefix = env.get("REDIS_PREFIX", config.store.prefix)
        config.tmdb.api_token = env.get("TMDB_API_READ_ACCESS_TOKEN") or None
        config.tmdb.base_url = env.get("TMDB_API_BASE_URL", config.tmdb.base_url)
        if env.get("PORT"):
            config.server.port = int(env["PORT"])
        if env.get("TBA_INTERVAL_SECONDS"):
            config.scheduler.tba_interval_seconds = float(env["TBA_INTERVAL_SECONDS"])
            config.scheduler.run_tba_processor = True
        return config
