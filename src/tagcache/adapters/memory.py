"""In-memory primitive store with dependency eviction."""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tagcache.types import ExpirationMode, TtlSpec

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Item:
    value: object
    ttl: TtlSpec
    expires_at: float | None
    depends_on: tuple[str, ...]


class MemoryStore:
    """Thread-safe in-memory store with TTLs, optional LRU bound and
    dependency eviction.

    Writing, removing or expiring a key evicts every item that was stored
    with that key in ``depends_on``; evictions cascade.
    """

    def __init__(
        self,
        max_items: int | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._items: OrderedDict[str, _Item] = OrderedDict()
        self._dependents: dict[str, set[str]] = {}
        self._max_items = max_items
        self._clock = clock
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, key: str) -> object | None:
        """Get a live value by key."""
        with self._lock:
            now = self._clock()
            item = self._live(key, now)
            if item is None:
                return None
            if item.ttl.mode is ExpirationMode.SLIDING:
                item.expires_at = now + (item.ttl.sliding_seconds or 0)
            self._items.move_to_end(key)  # LRU touch
            return item.value

    def add_if_absent(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> bool:
        """Store a value only if no live value exists."""
        with self._lock:
            now = self._clock()
            if self._live(key, now) is not None:
                return False
            self._write(key, self._new_item(value, ttl, depends_on, now))
            return True

    def set(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> int:
        """Store a value, returning how many dependent items were evicted."""
        with self._lock:
            item = self._new_item(value, ttl, depends_on, self._clock())
            return self._write(key, item)

    def remove(self, key: str) -> object | None:
        """Remove a value, returning it if it was live."""
        with self._lock:
            item = self._live(key, self._clock())
            if item is None:
                return None
            self._discard(key)
            return item.value

    def remove_if(self, key: str, expected: object) -> bool:
        """Remove a value only if it is (or equals) ``expected``."""
        with self._lock:
            item = self._live(key, self._clock())
            if item is None or not (item.value is expected or item.value == expected):
                return False
            self._discard(key)
            return True

    def contains(self, key: str) -> bool:
        """Check whether a live value exists, without touching it."""
        with self._lock:
            return self._live(key, self._clock()) is not None

    # -------------------------------------------------------------------------
    # Internal helpers (lock held)
    # -------------------------------------------------------------------------

    def _new_item(
        self, value: object, ttl: TtlSpec, depends_on: Sequence[str], now: float
    ) -> _Item:
        if ttl.mode is ExpirationMode.SLIDING:
            expires_at = now + (ttl.sliding_seconds or 0)
        elif ttl.mode is ExpirationMode.ABSOLUTE:
            expires_at = ttl.expires_at
        else:
            expires_at = None
        return _Item(value, ttl, expires_at, tuple(depends_on))

    def _live(self, key: str, now: float) -> _Item | None:
        item = self._items.get(key)
        if item is None:
            return None
        if item.expires_at is not None and now > item.expires_at:
            self._discard(key)
            return None
        return item

    def _write(self, key: str, item: _Item) -> int:
        previous = self._items.get(key)
        if previous is not None:
            self._unlink(key, previous)
        self._items[key] = item
        self._items.move_to_end(key)
        for dependency in item.depends_on:
            self._dependents.setdefault(dependency, set()).add(key)

        evicted = self._changed(key)

        if self._max_items and len(self._items) > self._max_items:
            oldest = next(iter(self._items))
            logger.debug("Evicting least recently used key %s", oldest)
            self._discard(oldest)
        return evicted

    def _discard(self, key: str) -> int:
        item = self._items.pop(key, None)
        if item is None:
            return 0
        self._unlink(key, item)
        return self._changed(key)

    def _unlink(self, key: str, item: _Item) -> None:
        for dependency in item.depends_on:
            dependents = self._dependents.get(dependency)
            if dependents is not None:
                dependents.discard(key)
                if not dependents:
                    del self._dependents[dependency]

    def _changed(self, key: str) -> int:
        """Evict everything depending on ``key``."""
        evicted = 0
        for dependent in self._dependents.pop(key, set()):
            if dependent in self._items:
                evicted += 1 + self._discard(dependent)
        return evicted
