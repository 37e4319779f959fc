"""Exceptions raised by tagcache.

Cache misses and stale entries are not errors: lookups report them as None.
"""


class CacheError(Exception):
    """Base class for all tagcache errors."""


class InvalidArgumentError(CacheError, ValueError):
    """Raised for malformed keys, durations or expiration policies."""


class StoreError(CacheError):
    """Raised when the underlying primitive store fails.

    The original exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, *, operation: str | None = None, key: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key
