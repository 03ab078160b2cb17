"""Best-effort caching over the key-value store."""

from .codec import Codec, CodecError, JSONCodec
from .evictor import BoundedIndexEvictor
from .kv_cache import KeyValueCache
from .read_through import CachedValue, Namespace, ReadThroughCache
from .result import CacheResult, CacheStatus

__all__ = [
    "Codec",
    "CodecError",
    "JSONCodec",
    "KeyValueCache",
    "BoundedIndexEvictor",
    "ReadThroughCache",
    "Namespace",
    "CachedValue",
    "CacheResult",
    "CacheStatus",
]
