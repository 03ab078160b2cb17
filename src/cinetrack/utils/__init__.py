"""Configuration and resilience helpers."""

from .config import AppConfig, CacheConfig, SchedulerConfig, StoreConfig, TMDBConfig
from .resilience import CircuitBreaker, CircuitBreakerConfig, CircuitOpenError, CircuitState, with_retries

__all__ = [
    "AppConfig",
    "CacheConfig",
    "SchedulerConfig",
    "StoreConfig",
    "TMDBConfig",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitOpenError",
    "CircuitState",
    "with_retries",
]
