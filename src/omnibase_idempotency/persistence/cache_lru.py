# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bounded least-recently-used cache for idempotency records.

The cache is private to one process and exists only to save round trips to
the backing store for repeated lookups of the same key. It provides no
cross-process guarantee and is never consulted to decide exclusivity.

Concurrency:
    All operations are synchronous and never await, so the cache is safe to
    share between coroutines of one event loop. It is not thread-safe.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    """Cached value with its insertion time (monotonic seconds)."""

    value: V
    inserted_at: float


class LRUCache(Generic[K, V]):
    """Least-recently-used cache with a fixed capacity.

    Reads through get() refresh an entry's recency; adding past capacity
    evicts the least recently used entry.

    Example:
        >>> cache: LRUCache[str, int] = LRUCache(max_size=2)
        >>> cache.add("a", 1)
        >>> cache.add("b", 2)
        >>> cache.get("a")
        1
        >>> cache.add("c", 3)  # evicts "b"
        >>> cache.has("b")
        False
    """

    __slots__ = ("_entries", "_max_size")

    def __init__(self, max_size: int = 100) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()

    @property
    def max_size(self) -> int:
        """Configured capacity."""
        return self._max_size

    def add(self, key: K, value: V) -> None:
        """Insert or replace a value, marking it most recently used."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(value=value, inserted_at=time.monotonic())
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)

    def get(self, key: K) -> V | None:
        """Return the cached value, or None on a miss."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Return the cache entry (value and insertion time), or None on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry

    def has(self, key: K) -> bool:
        """Check membership without touching recency."""
        return key in self._entries

    def remove(self, key: K) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def size(self) -> int:
        """Number of cached entries."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["CacheEntry", "LRUCache"]
