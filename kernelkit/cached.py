"""Buddy allocator with a per-order cache of freed blocks.

Freed blocks are kept in a cache instead of being returned to the buddy
systems, so deallocation is O(1) and most allocations are O(1) as well.
When the buddy systems run dry, cached blocks are handed back (largest
orders first) until a block of the requested order can be formed.
Allocation is therefore amortised O(log n) and O(n) in the worst case.

Use the plain buddy allocator when a strict bound on running time matters;
use this one for better performance in most other cases.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from .buddy import MultiBuddySystem
from .order import Layout, to_order

__all__ = ["CachedBuddySystem", "Allocator"]

_CACHED_ORDERS = 32


class CachedBuddySystem:
    """Several buddy systems behind a cache of freed blocks."""

    def __init__(self, page_size: int) -> None:
        self._inner = MultiBuddySystem(page_size)
        self._cache: List[List[int]] = [[] for _ in range(_CACHED_ORDERS)]

    @property
    def page_size(self) -> int:
        return self._inner.page_size

    def add_zone(self, begin: int, end: int) -> None:
        """Add free memory ``[begin, end)``."""
        self._inner.add_zone(begin, end)

    def alloc(self, layout: Layout) -> Optional[int]:
        """Allocate memory fitting ``layout``; return the address or None."""
        order = to_order(self.page_size, layout)
        if order < len(self._cache) and self._cache[order]:
            return self._cache[order].pop()

        addr = self._inner.alloc_order(order)
        if addr is not None:
            return addr

        # Hand cached blocks back until a large enough block is merged.
        for d in reversed(range(len(self._cache))):
            cached = self._cache[d]
            while cached:
                if self._inner.free(cached.pop(), d) >= order:
                    return self._inner.alloc_order(order)
        return None

    def dealloc(self, addr: int, layout: Layout) -> None:
        """Free memory at ``addr`` allocated with ``layout`` in O(1)."""
        order = to_order(self.page_size, layout)
        if order < len(self._cache):
            self._cache[order].append(addr)
        else:
            self._inner.free(addr, order)


class Allocator:
    """Thread-safe allocator with cached buddy systems."""

    def __init__(self, page_size: int) -> None:
        self._inner = CachedBuddySystem(page_size)
        self._lock = threading.Lock()

    def add_zone(self, begin: int, end: int) -> None:
        with self._lock:
            self._inner.add_zone(begin, end)

    def alloc(self, layout: Layout) -> Optional[int]:
        with self._lock:
            return self._inner.alloc(layout)

    def dealloc(self, addr: int, layout: Layout) -> None:
        with self._lock:
            self._inner.dealloc(addr, layout)