from .base import InMemoryStore, KeyValueStore
from .factory import connect_store, create_store
from .redis_adapter import RedisStore

__all__ = ["KeyValueStore", "InMemoryStore", "RedisStore", "create_store", "connect_store"]
