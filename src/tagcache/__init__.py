"""tagcache - In-process object cache with tag-based invalidation."""

from contextlib import suppress

# Primitive stores
from tagcache.adapters import (
    CounterStore,
    MemoryStore,
    PrimitiveStore,
)

# Duration parsing
from tagcache.duration import parse_duration

# Errors
from tagcache.errors import CacheError, InvalidArgumentError, StoreError

# Policies
from tagcache.policy import CacheExpirationPolicy

# Provider API
from tagcache.provider import CacheProvider, create_cache_provider

# Core types
from tagcache.types import (
    CacheEntry,
    CacheKey,
    CacheTag,
    Duration,
    ExpirationMode,
    TtlSpec,
)
from tagcache.versions import TagVersionStore, VersionClock

# Optional store imports - only available when dependencies are installed
with suppress(ImportError):
    from tagcache.adapters import RedisStore

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CacheError",
    "CacheExpirationPolicy",
    "CacheKey",
    "CacheProvider",
    "CacheTag",
    "CounterStore",
    "Duration",
    "ExpirationMode",
    "InvalidArgumentError",
    "MemoryStore",
    "PrimitiveStore",
    "RedisStore",
    "StoreError",
    "TagVersionStore",
    "TtlSpec",
    "VersionClock",
    "create_cache_provider",
    "parse_duration",
]
