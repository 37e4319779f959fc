"""Redis primitive store.

Redis has no per-key change notification that fits here, so ``depends_on``
is ignored and tag invalidation relies on pull validation by the provider.
Tag versions are stored as bare integers and advanced with INCR, so several
processes can share one Redis.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from redis.exceptions import RedisError, WatchError

from tagcache.errors import StoreError
from tagcache.types import CacheEntry, ExpirationMode, TtlSpec

logger = logging.getLogger(__name__)


def _serialize(value: object, ttl: TtlSpec) -> str:
    """Serialize a value and its sliding window to JSON.

    Integers without a sliding window are stored bare so INCR works on them.
    """
    if (
        isinstance(value, int)
        and not isinstance(value, bool)
        and ttl.mode is not ExpirationMode.SLIDING
    ):
        return str(value)
    payload: dict[str, Any] = {}
    if isinstance(value, CacheEntry):
        payload["entry"] = {
            "value": value.value,
            "tag_versions": value.tag_versions,
        }
    else:
        payload["value"] = value
    if ttl.mode is ExpirationMode.SLIDING:
        payload["sliding_ms"] = _sliding_ms(ttl)
    return json.dumps(payload)


def _deserialize(data: bytes | str) -> tuple[object, int | None]:
    """Deserialize JSON to a value and its sliding window."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    obj = json.loads(data)
    if isinstance(obj, int):
        return obj, None
    if "entry" in obj:
        entry = obj["entry"]
        value: object = CacheEntry(
            value=entry["value"],
            tag_versions={tag: int(v) for tag, v in entry["tag_versions"].items()},
        )
    else:
        value = obj["value"]
    return value, obj.get("sliding_ms")


def _sliding_ms(ttl: TtlSpec) -> int:
    return max(1, int((ttl.sliding_seconds or 0) * 1000))


@contextmanager
def _store_errors(operation: str, key: str) -> Iterator[None]:
    try:
        yield
    except RedisError as e:
        logger.warning("Redis %s failed for key %s: %s", operation, key, e)
        raise StoreError(
            f"Redis {operation} failed: {e}", operation=operation, key=key
        ) from e


class RedisStore:
    """Sync Redis primitive store."""

    def __init__(
        self,
        client: Any,  # redis.Redis
        *,
        prefix: str = "tagcache",
    ) -> None:
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        """Generate full Redis key."""
        return f"{self._prefix}:{key}"

    def _expiry(self, ttl: TtlSpec) -> dict[str, int] | None:
        """Redis SET expiry arguments, or None if the deadline has passed."""
        if ttl.mode is ExpirationMode.SLIDING:
            return {"px": _sliding_ms(ttl)}
        if ttl.mode is ExpirationMode.ABSOLUTE and ttl.expires_at is not None:
            pxat = int(ttl.expires_at * 1000)
            if pxat <= int(time.time() * 1000):
                return None
            return {"pxat": pxat}
        return {}

    def get(self, key: str) -> object | None:
        """Get a value by key, re-arming its sliding window."""
        full_key = self._key(key)
        with _store_errors("get", key):
            data = self._client.get(full_key)
            if data is None:
                return None
            value, sliding_ms = _deserialize(data)
            if sliding_ms:
                self._client.pexpire(full_key, sliding_ms)
        return value

    def add_if_absent(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> bool:
        """Store a value with SET NX."""
        full_key = self._key(key)
        expiry = self._expiry(ttl)
        with _store_errors("add", key):
            if expiry is None:
                # Written and expired at once
                return not self._client.exists(full_key)
            return bool(
                self._client.set(full_key, _serialize(value, ttl), nx=True, **expiry)
            )

    def set(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> int:
        """Store a value, overwriting. Never evicts dependents."""
        full_key = self._key(key)
        expiry = self._expiry(ttl)
        with _store_errors("set", key):
            if expiry is None:
                self._client.delete(full_key)
            else:
                self._client.set(full_key, _serialize(value, ttl), **expiry)
        return 0

    def remove(self, key: str) -> object | None:
        """Remove a value with GETDEL."""
        with _store_errors("remove", key):
            data = self._client.getdel(self._key(key))
        if data is None:
            return None
        value, _ = _deserialize(data)
        return value

    def contains(self, key: str) -> bool:
        """Check whether a value exists."""
        with _store_errors("contains", key):
            return bool(self._client.exists(self._key(key)))

    def remove_if(self, key: str, expected: object) -> bool:
        """Remove a value only if it still equals ``expected``.

        Uses WATCH/MULTI; a concurrent write aborts the delete.
        """
        full_key = self._key(key)
        with _store_errors("remove_if", key):
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(full_key)
                    data = pipe.get(full_key)
                    if data is None or _deserialize(data)[0] != expected:
                        pipe.unwatch()
                        return False
                    pipe.multi()
                    pipe.delete(full_key)
                    pipe.execute()
                except WatchError:
                    return False
        return True

    def increment(self, key: str) -> int:
        """Atomically add one to an integer value with INCR."""
        with _store_errors("increment", key):
            return int(self._client.incr(self._key(key)))
