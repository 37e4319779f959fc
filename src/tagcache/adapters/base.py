"""Base protocols for primitive stores."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from tagcache.types import TtlSpec


@runtime_checkable
class PrimitiveStore(Protocol):
    """Key-value store that holds values and enforces their TTLs.

    ``depends_on`` is the change-notification hook: it names store keys
    whose change (write, removal or expiry) should evict the written item,
    like a change monitor attached to the item. Stores without change
    notification accept and ignore it; the provider then validates tag
    versions on read.
    """

    def get(self, key: str) -> object | None:
        """Get a live value by key, touching sliding expiration."""
        ...

    def add_if_absent(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> bool:
        """Store a value only if no live value exists. Atomic per key."""
        ...

    def set(
        self, key: str, value: object, ttl: TtlSpec, depends_on: Sequence[str] = ()
    ) -> int:
        """Store a value, overwriting. Returns the number of dependents evicted."""
        ...

    def remove(self, key: str) -> object | None:
        """Remove a value, returning it if it was live."""
        ...

    def remove_if(self, key: str, expected: object) -> bool:
        """Remove a value only if it still equals ``expected``. Atomic per key."""
        ...

    def contains(self, key: str) -> bool:
        """Check whether a live value exists."""
        ...


@runtime_checkable
class CounterStore(Protocol):
    """Optional capability for stores shared between processes."""

    def increment(self, key: str) -> int:
        """Atomically add one to an integer value and return the result."""
        ...
