"""Per-entry time-based expiration policies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import cache

from tagcache.duration import to_timedelta
from tagcache.errors import InvalidArgumentError
from tagcache.types import Duration, ExpirationMode, TtlSpec

INFINITE_ABSOLUTE_EXPIRATION = datetime.max.replace(tzinfo=timezone.utc)
NO_SLIDING_EXPIRATION = timedelta(0)


def _as_span(span: Duration | timedelta) -> timedelta:
    try:
        return to_timedelta(span)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e


@dataclass(frozen=True, slots=True)
class CacheExpirationPolicy:
    """Eviction details for a single cache entry.

    Exactly one of ``absolute_expiration`` and ``sliding_expiration`` is
    meaningful, selected by ``mode``. ``ExpirationMode.NONE`` never expires
    by time.
    """

    mode: ExpirationMode = ExpirationMode.NONE
    absolute_expiration: datetime = INFINITE_ABSOLUTE_EXPIRATION
    sliding_expiration: timedelta = NO_SLIDING_EXPIRATION

    def __post_init__(self) -> None:
        if self.mode is ExpirationMode.ABSOLUTE:
            if not isinstance(self.absolute_expiration, datetime):
                raise InvalidArgumentError(
                    "Absolute expiration requires a concrete deadline"
                )
            if self.absolute_expiration.tzinfo is None:
                # Naive datetimes are local time
                object.__setattr__(
                    self, "absolute_expiration", self.absolute_expiration.astimezone()
                )
        elif self.mode is ExpirationMode.SLIDING:
            if not isinstance(self.sliding_expiration, timedelta):
                raise InvalidArgumentError("Sliding expiration requires a timedelta")
            if self.sliding_expiration <= NO_SLIDING_EXPIRATION:
                raise InvalidArgumentError(
                    f"Sliding expiration must be positive, got {self.sliding_expiration!r}"
                )

    @staticmethod
    @cache
    def default() -> CacheExpirationPolicy:
        """The shared policy that never expires by time."""
        return CacheExpirationPolicy()

    @classmethod
    def with_absolute_expiration(
        cls, deadline: datetime | timedelta | Duration
    ) -> CacheExpirationPolicy:
        """Expire at a fixed point in time.

        Args:
            deadline: A datetime used as-is, or a span ("5m", milliseconds,
                timedelta) added to the current time.
        """
        if isinstance(deadline, datetime):
            return cls(mode=ExpirationMode.ABSOLUTE, absolute_expiration=deadline)
        span = _as_span(deadline)
        return cls(
            mode=ExpirationMode.ABSOLUTE,
            absolute_expiration=datetime.now(timezone.utc) + span,
        )

    @classmethod
    def with_sliding_expiration(
        cls, window: timedelta | Duration
    ) -> CacheExpirationPolicy:
        """Expire once the entry has not been read for ``window``."""
        return cls(mode=ExpirationMode.SLIDING, sliding_expiration=_as_span(window))

    def to_ttl(self) -> TtlSpec:
        """Resolve into the expiration a primitive store understands."""
        if self.mode is ExpirationMode.SLIDING:
            return TtlSpec.sliding(self.sliding_expiration.total_seconds())
        if (
            self.mode is ExpirationMode.ABSOLUTE
            and self.absolute_expiration != INFINITE_ABSOLUTE_EXPIRATION
        ):
            return TtlSpec.absolute(self.absolute_expiration.timestamp())
        return TtlSpec.infinite()
