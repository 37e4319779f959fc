"""Primitive stores for tagcache."""

from contextlib import suppress

from tagcache.adapters.base import (
    CounterStore,
    PrimitiveStore,
)
from tagcache.adapters.memory import MemoryStore

# Optional stores - only available when dependencies are installed
with suppress(ImportError):
    from tagcache.adapters.redis import RedisStore

__all__ = [
    "CounterStore",
    "MemoryStore",
    "PrimitiveStore",
    "RedisStore",
]
