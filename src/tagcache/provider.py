"""Cache provider - the public facade.

Provides:
- add(), set(): Write entries with an expiration policy and tag dependencies
- get(), get_or_add(), contains(): Read entries, dropping tag-stale ones
- remove(): Explicit eviction
- expire(): Tag-based invalidation
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from tagcache.adapters.base import PrimitiveStore
from tagcache.adapters.memory import MemoryStore
from tagcache.policy import CacheExpirationPolicy
from tagcache.errors import InvalidArgumentError
from tagcache.types import CacheEntry, CacheKey, CacheTag, TtlSpec
from tagcache.versions import DEFAULT_TAG_PREFIX, TagVersionStore

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CacheProvider:
    """Key-value cache with tag invalidation over a primitive store.

    The primitive store is used with ``CacheKey.key`` verbatim as the entry
    key. Tag versions live in the same store under ``tag_prefix``.

    Concurrency follows the store: ``add`` is atomic per key, nothing is
    atomic across keys, and ``get_or_add`` does not deduplicate concurrent
    factory calls.
    """

    def __init__(
        self,
        store: PrimitiveStore,
        *,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        default_policy: CacheExpirationPolicy | None = None,
    ) -> None:
        self._store = store
        self._versions = TagVersionStore(store, prefix=tag_prefix)
        self._default_policy = default_policy or CacheExpirationPolicy.default()

    @property
    def versions(self) -> TagVersionStore:
        return self._versions

    def add(
        self,
        key: CacheKey,
        value: Any,
        policy: CacheExpirationPolicy | None = None,
    ) -> bool:
        """Insert an entry unless a live one exists.

        Returns:
            True if the entry was inserted, False if a live entry was
            already present. A refused add leaves that entry untouched, but
            the tags of ``key`` may have been created as a side effect of
            capturing their versions.

        Raises:
            InvalidArgumentError: If ``key.key`` is in the tag namespace.
        """
        entry, ttl, depends_on = self._prepare(key, value, policy)
        if self._store.add_if_absent(key.key, entry, ttl, depends_on):
            return True

        # A tag-stale entry does not count as present. _fetch only removes
        # the exact stale entry it read, so one racing add still wins.
        if self._fetch(key.key) is not None:
            return False
        return self._store.add_if_absent(key.key, entry, ttl, depends_on)

    def set(
        self,
        key: CacheKey,
        value: Any,
        policy: CacheExpirationPolicy | None = None,
    ) -> bool:
        """Insert an entry, overwriting any existing one."""
        entry, ttl, depends_on = self._prepare(key, value, policy)
        self._store.set(key.key, entry, ttl, depends_on)
        return True

    def get(self, key: CacheKey) -> Any | None:
        """Get a cached value, or None if missing, expired or stale."""
        entry = self._fetch(key.key)
        return entry.value if entry is not None else None

    def get_or_add(
        self,
        key: CacheKey,
        value_factory: Callable[[CacheKey], T],
        policy: CacheExpirationPolicy | None = None,
    ) -> T | None:
        """Get a cached value or compute and add it.

        On a miss ``value_factory`` runs once. If another caller adds the
        same key first, None is returned instead of either value; callers
        should treat that as "not cached".
        """
        entry = self._fetch(key.key)
        if entry is not None:
            logger.debug("Cache hit: %s", key.key)
            return entry.value  # type: ignore[no-any-return]

        logger.debug("Cache miss: %s", key.key)
        value = value_factory(key)
        if self.add(key, value, policy):
            return value

        logger.debug("Lost add race for %s", key.key)
        return None

    def remove(self, key: CacheKey) -> Any | None:
        """Remove an entry, returning its value if it was live."""
        if self._versions.is_tag_key(key.key):
            return None
        entry = self._store.remove(key.key)
        if not isinstance(entry, CacheEntry):
            return None
        if not self._versions.is_current(entry.tag_versions):
            return None
        return entry.value

    def contains(self, key: CacheKey) -> bool:
        """Check whether a live, fresh entry exists."""
        return self._fetch(key.key) is not None

    def expire(self, tag: CacheTag | str) -> int:
        """Invalidate every entry depending on ``tag``.

        Returns:
            Number of entries evicted eagerly by the store. This is a best
            effort count: stores that validate on read report 0.
        """
        evicted = self._versions.bump(tag)
        logger.info("Expired tag %s (%d entries evicted)", tag, evicted)
        return evicted

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _prepare(
        self,
        key: CacheKey,
        value: Any,
        policy: CacheExpirationPolicy | None,
    ) -> tuple[CacheEntry[Any], TtlSpec, list[str]]:
        if self._versions.is_tag_key(key.key):
            raise InvalidArgumentError(
                f"Cache key {key.key!r} collides with the tag version namespace"
            )
        effective = policy or self._default_policy
        tags = sorted(key.tags)
        entry: CacheEntry[Any] = CacheEntry(
            value=value,
            tag_versions=self._versions.snapshot(tags),
        )
        depends_on = [self._versions.tag_key(tag) for tag in tags]
        return entry, effective.to_ttl(), depends_on

    def _fetch(self, store_key: str) -> CacheEntry[Any] | None:
        entry = self._store.get(store_key)
        if not isinstance(entry, CacheEntry):
            return None
        if not self._versions.is_current(entry.tag_versions):
            logger.debug("Dropping stale entry %s", store_key)
            self._store.remove_if(store_key, entry)
            return None
        return entry


def create_cache_provider(
    store: PrimitiveStore | None = None,
    *,
    max_items: int | None = None,
    tag_prefix: str = DEFAULT_TAG_PREFIX,
    default_policy: CacheExpirationPolicy | None = None,
) -> CacheProvider:
    """Create a cache provider.

    Args:
        store: Primitive store (default: a new MemoryStore)
        max_items: LRU bound for the default MemoryStore
        tag_prefix: Storage key prefix for tag versions
        default_policy: Policy used when a write passes none

    Returns:
        CacheProvider instance
    """
    if store is None:
        store = MemoryStore(max_items=max_items)
    elif max_items is not None:
        raise InvalidArgumentError("max_items only applies to the default MemoryStore")

    return CacheProvider(
        store,
        tag_prefix=tag_prefix,
        default_policy=default_policy,
    )


__all__ = ["CacheProvider", "create_cache_provider"]
