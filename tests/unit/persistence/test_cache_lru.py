# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for LRUCache."""

from __future__ import annotations

import pytest

from omnibase_idempotency.persistence import LRUCache


class TestLRUCache:
    """Tests for capacity, recency and removal."""

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            LRUCache(max_size=0)

    def test_add_and_get(self) -> None:
        cache: LRUCache[str, int] = LRUCache(max_size=2)
        cache.add("a", 1)

        assert cache.get("a") == 1
        assert cache.get("missing") is None

    def test_evicts_least_recently_used(self) -> None:
        cache: LRUCache[str, int] = LRUCache(max_size=2)
        cache.add("a", 1)
        cache.add("b", 2)
        cache.get("a")
        cache.add("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_has_does_not_refresh_recency(self) -> None:
        cache: LRUCache[str, int] = LRUCache(max_size=2)
        cache.add("a", 1)
        cache.add("b", 2)
        assert cache.has("a")
        cache.add("c", 3)

        assert not cache.has("a")

    def test_replacing_value_refreshes_entry(self) -> None:
        cache: LRUCache[str, int] = LRUCache(max_size=2)
        cache.add("a", 1)
        cache.add("b", 2)
        cache.add("a", 10)
        cache.add("c", 3)

        assert cache.get("a") == 10
        assert cache.get("b") is None

    def test_entry_exposes_insertion_time(self) -> None:
        cache: LRUCache[str, int] = LRUCache()
        cache.add("a", 1)

        entry = cache.get_entry("a")

        assert entry is not None
        assert entry.value == 1
        assert entry.inserted_at > 0

    def test_remove_and_clear(self) -> None:
        cache: LRUCache[str, int] = LRUCache()
        cache.add("a", 1)
        cache.add("b", 2)

        cache.remove("a")
        cache.remove("never-added")
        assert cache.size() == 1

        cache.clear()
        assert cache.size() == 0
