"""Shared pytest fixtures."""

import threading

import pytest

from tagcache import CacheProvider, MemoryStore


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DictStore:
    """Primitive store without TTLs or change notification."""

    def __init__(self) -> None:
        self.data: dict[str, object] = {}
        self._lock = threading.Lock()

    def get(self, key):
        return self.data.get(key)

    def add_if_absent(self, key, value, ttl, depends_on=()):
        with self._lock:
            if key in self.data:
                return False
            self.data[key] = value
            return True

    def set(self, key, value, ttl, depends_on=()):
        self.data[key] = value
        return 0

    def remove(self, key):
        return self.data.pop(key, None)

    def remove_if(self, key, expected):
        with self._lock:
            if key not in self.data or self.data[key] != expected:
                return False
            del self.data[key]
            return True

    def contains(self, key):
        return key in self.data


class CounterDictStore(DictStore):
    """DictStore with an atomic increment, like Redis INCR."""

    def increment(self, key):
        with self._lock:
            value = int(self.data.get(key, 0)) + 1
            self.data[key] = value
            return value


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed time."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryStore:
    """Create a fresh MemoryStore driven by the fake clock."""
    return MemoryStore(clock=clock)


@pytest.fixture
def provider(store: MemoryStore) -> CacheProvider:
    """Create a CacheProvider over the memory store."""
    return CacheProvider(store)


@pytest.fixture
def dict_store() -> DictStore:
    """Create a store that only supports pull validation."""
    return DictStore()


@pytest.fixture
def counter_store() -> CounterDictStore:
    """Create a pull-only store with an atomic increment."""
    return CounterDictStore()
