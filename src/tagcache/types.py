"""Core types for tagcache."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, NewType, TypeVar

from tagcache.errors import InvalidArgumentError

T = TypeVar("T")

CacheTag = NewType("CacheTag", str)

# Duration type alias
Duration = str | int  # "30s", "5m", "2h", "1d" or milliseconds


class ExpirationMode(Enum):
    """How a cache entry expires by time."""

    NONE = "none"
    SLIDING = "sliding"
    ABSOLUTE = "absolute"


@dataclass(frozen=True, slots=True, init=False)
class CacheKey:
    """Identity of a cache entry plus the tags it depends on.

    Only ``key`` takes part in equality; ``tags`` declares which tags
    invalidate the entry.

    Example:
        CacheKey("user:123", tags=["users", "user:123"])
    """

    key: str
    tags: frozenset[str] = field(compare=False)

    def __init__(self, key: str, tags: Iterable[str] = ()) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError("Cache key must be a non-empty string")
        if isinstance(tags, str):
            tags = (tags,)
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "tags", frozenset(tags))

    def __repr__(self) -> str:
        return f"CacheKey({self.key!r}, tags={sorted(self.tags)!r})"


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value with the tag versions observed when it was written."""

    value: T
    tag_versions: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TtlSpec:
    """Store-facing expiration: infinite, sliding window or absolute deadline."""

    mode: ExpirationMode = ExpirationMode.NONE
    sliding_seconds: float | None = None  # window length
    expires_at: float | None = None  # Unix timestamp, seconds

    @classmethod
    def infinite(cls) -> "TtlSpec":
        return cls()

    @classmethod
    def sliding(cls, seconds: float) -> "TtlSpec":
        return cls(mode=ExpirationMode.SLIDING, sliding_seconds=seconds)

    @classmethod
    def absolute(cls, timestamp: float) -> "TtlSpec":
        return cls(mode=ExpirationMode.ABSOLUTE, expires_at=timestamp)
