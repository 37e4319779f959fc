"""Tests for core types."""

import pytest

from tagcache import CacheKey, ExpirationMode, InvalidArgumentError, TtlSpec


class TestCacheKey:
    """Tests for CacheKey."""

    def test_tags_are_a_set(self) -> None:
        key = CacheKey("q:1", tags=["b", "a", "b"])
        assert key.tags == frozenset({"a", "b"})

    def test_single_string_tag(self) -> None:
        """Test that a bare string is one tag, not its characters."""
        assert CacheKey("q:1", tags="users").tags == frozenset({"users"})

    def test_identity_ignores_tags(self) -> None:
        assert CacheKey("q:1", tags=["a"]) == CacheKey("q:1", tags=["b"])
        assert hash(CacheKey("q:1", tags=["a"])) == hash(CacheKey("q:1"))
        assert CacheKey("q:1") != CacheKey("q:2")

    def test_immutable(self) -> None:
        key = CacheKey("q:1")
        with pytest.raises(AttributeError):
            key.key = "q:2"  # type: ignore[misc]

    @pytest.mark.parametrize("value", ["", None, 42])
    def test_rejects_invalid_key(self, value: object) -> None:
        with pytest.raises(InvalidArgumentError):
            CacheKey(value)  # type: ignore[arg-type]

    def test_tags_are_case_sensitive(self) -> None:
        assert CacheKey("q", tags=["Users", "users"]).tags == {"Users", "users"}


class TestTtlSpec:
    """Tests for TtlSpec constructors."""

    def test_infinite(self) -> None:
        ttl = TtlSpec.infinite()
        assert ttl.mode is ExpirationMode.NONE
        assert ttl.expires_at is None
        assert ttl.sliding_seconds is None

    def test_sliding(self) -> None:
        ttl = TtlSpec.sliding(5.0)
        assert ttl.mode is ExpirationMode.SLIDING
        assert ttl.sliding_seconds == 5.0

    def test_absolute(self) -> None:
        ttl = TtlSpec.absolute(1234.5)
        assert ttl.mode is ExpirationMode.ABSOLUTE
        assert ttl.expires_at == 1234.5
