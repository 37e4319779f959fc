"""Tag version tracking.

Each tag maps to an integer version kept in the primitive store. Entries
capture the versions of their tags when written; expiring a tag advances its
version, so every entry holding an older version is stale. No tag -> keys
index is kept.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable

from tagcache.adapters.base import CounterStore, PrimitiveStore
from tagcache.types import TtlSpec

logger = logging.getLogger(__name__)

DEFAULT_TAG_PREFIX = "global::tag::"


class VersionClock:
    """Issues strictly increasing versions based on ``time.time_ns``.

    Two versions requested within the same clock tick still differ.
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self, floor: int = 0) -> int:
        """Return a version greater than ``floor`` and every earlier one."""
        with self._lock:
            self._last = max(time.time_ns(), self._last + 1, floor + 1)
            return self._last


class TagVersionStore:
    """Reads and advances tag versions held in a primitive store."""

    def __init__(
        self,
        store: PrimitiveStore,
        *,
        prefix: str = DEFAULT_TAG_PREFIX,
        clock: VersionClock | None = None,
    ) -> None:
        self._store = store
        self._prefix = prefix
        self._clock = clock or VersionClock()

    def tag_key(self, tag: str) -> str:
        """Storage key for a tag's version."""
        return f"{self._prefix}{tag}"

    def is_tag_key(self, key: str) -> bool:
        """Check whether a store key belongs to the tag version namespace."""
        return key.startswith(self._prefix)

    def current_version(self, tag: str) -> int:
        """Get a tag's version, creating the tag if it has never been seen.

        A stored value that is not an integer is replaced with a fresh
        version, which makes every entry depending on the tag stale.
        """
        key = self.tag_key(tag)
        version = self._store.get(key)
        while not _is_version(version):
            created = self._clock.next()
            if version is not None:
                logger.warning("Replacing non-integer version of tag %s", tag)
                self._store.set(key, created, TtlSpec.infinite())
                return created
            if self._store.add_if_absent(key, created, TtlSpec.infinite()):
                return created
            # Lost the race to create the tag
            version = self._store.get(key)
        return version  # type: ignore[return-value]

    def snapshot(self, tags: Iterable[str]) -> dict[str, int]:
        """Capture the current version of each tag."""
        return {tag: self.current_version(tag) for tag in tags}

    def is_current(self, tag_versions: dict[str, int]) -> bool:
        """Check that no tag has been bumped since the versions were captured."""
        return all(
            self.current_version(tag) == version
            for tag, version in tag_versions.items()
        )

    def bump(self, tag: str) -> int:
        """Advance a tag's version.

        Stores implementing ``CounterStore`` are bumped with their atomic
        increment, so concurrent bumps from several processes each produce
        a distinct version. Other stores are read and rewritten; in-process
        bumps stay distinct through the shared ``VersionClock``.

        Returns:
            Number of entries the store evicted eagerly. Stores without
            change notification always report 0.
        """
        key = self.tag_key(tag)
        if isinstance(self._store, CounterStore):
            self.current_version(tag)
            version = self._store.increment(key)
            evicted = 0
        else:
            stored = self._store.get(key)
            floor = stored if _is_version(stored) else 0
            version = self._clock.next(floor)  # type: ignore[arg-type]
            evicted = self._store.set(key, version, TtlSpec.infinite())
        logger.debug("Tag %s advanced to version %d", tag, version)
        return evicted


def _is_version(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
