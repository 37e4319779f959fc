"""Tests for tag version tracking."""

import pytest

from tagcache import CacheEntry, MemoryStore, TagVersionStore, TtlSpec, VersionClock


@pytest.fixture
def versions(store: MemoryStore) -> TagVersionStore:
    return TagVersionStore(store)


class TestVersionClock:
    """Tests for VersionClock."""

    def test_strictly_increasing_within_one_tick(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a frozen wall clock still yields distinct versions."""
        monkeypatch.setattr("tagcache.versions.time.time_ns", lambda: 1000)
        clock = VersionClock()
        issued = [clock.next() for _ in range(5)]
        assert issued == [1000, 1001, 1002, 1003, 1004]

    def test_respects_floor(self) -> None:
        clock = VersionClock()
        floor = clock.next() + 10**15
        assert clock.next(floor) == floor + 1


class TestTagVersionStore:
    """Tests for TagVersionStore."""

    def test_tag_key(self, versions: TagVersionStore) -> None:
        assert versions.tag_key("users") == "global::tag::users"

    def test_custom_prefix(self, store: MemoryStore) -> None:
        versions = TagVersionStore(store, prefix="tags/")
        versions.current_version("users")
        assert store.contains("tags/users")

    def test_current_version_creates_tag(
        self, versions: TagVersionStore, store: MemoryStore
    ) -> None:
        assert not store.contains("global::tag::users")
        version = versions.current_version("users")
        assert store.get("global::tag::users") == version
        assert versions.current_version("users") == version

    def test_bump_advances_version(self, versions: TagVersionStore) -> None:
        before = versions.current_version("users")
        versions.bump("users")
        assert versions.current_version("users") > before

    def test_bump_exceeds_stored_version(
        self, versions: TagVersionStore, store: MemoryStore
    ) -> None:
        """Test that a version far in the future is still exceeded."""
        future = 2**62
        store.set("global::tag::users", future, TtlSpec.infinite())
        versions.bump("users")
        assert versions.current_version("users") == future + 1

    def test_bump_unknown_tag(self, versions: TagVersionStore) -> None:
        assert versions.bump("never-seen") == 0
        assert versions.current_version("never-seen") > 0

    def test_is_current(self, versions: TagVersionStore) -> None:
        snapshot = versions.snapshot(["a", "b"])
        assert versions.is_current(snapshot)
        versions.bump("b")
        assert not versions.is_current(snapshot)
        assert versions.is_current({"a": snapshot["a"]})

    def test_empty_snapshot_is_current(self, versions: TagVersionStore) -> None:
        assert versions.snapshot([]) == {}
        assert versions.is_current({})

    def test_lost_tag_is_recreated_newer(
        self, versions: TagVersionStore, store: MemoryStore
    ) -> None:
        """Test that an evicted tag never comes back with an old version."""
        snapshot = versions.snapshot(["users"])
        store.remove("global::tag::users")
        assert not versions.is_current(snapshot)

    def test_bump_reports_eager_evictions(
        self, versions: TagVersionStore, store: MemoryStore
    ) -> None:
        tag_key = versions.tag_key("users")
        versions.current_version("users")
        store.set("a", 1, TtlSpec.infinite(), depends_on=[tag_key])
        store.set("b", 2, TtlSpec.infinite(), depends_on=[tag_key])
        assert versions.bump("users") == 2
        assert not store.contains("a")
        assert not store.contains("b")

    def test_non_integer_version_is_replaced(
        self, versions: TagVersionStore, store: MemoryStore
    ) -> None:
        snapshot = versions.snapshot(["users"])
        store.set("global::tag::users", CacheEntry(value="junk"), TtlSpec.infinite())

        assert not versions.is_current(snapshot)
        assert isinstance(store.get("global::tag::users"), int)
        assert versions.bump("users") == 0

    def test_bump_uses_atomic_increment(self, counter_store) -> None:
        versions = TagVersionStore(counter_store)
        before = versions.current_version("users")

        assert versions.bump("users") == 0
        assert versions.bump("users") == 0
        assert versions.current_version("users") == before + 2

    def test_bump_increments_unseen_tag(self, counter_store) -> None:
        versions = TagVersionStore(counter_store)
        versions.bump("users")
        assert counter_store.data["global::tag::users"] > 1
