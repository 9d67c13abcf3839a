"""Buddy system page allocator over a simulated address range.

Allocation and deallocation both finish in O(log n), where n is the number
of pages handled by one buddy system.  Addresses are plain integers; the
allocator keeps its bookkeeping in Python objects but lays out the address
range exactly as an in-place allocator would::

    start         bitmap_begin          page_begin          page_end
      |               |                    |                   |
      v               v                    v                   v
      +---------------+--------+-----------+-------------------+
      |    header     | bitmap | (padding) | 2^max_order pages |
      +---------------+--------+-----------+-------------------+
"""

from __future__ import annotations

import threading
from typing import Iterator, List, Optional, Set

from .order import Layout, to_order
from .rawlist import RawList, RawNode

__all__ = [
    "left",
    "right",
    "father",
    "buddy_index",
    "BuddySystem",
    "MultiBuddySystem",
    "Allocator",
]

_MAX_ORDERS = 32
_WORD = 8
# Header: five words of bookkeeping, 32 two-word list heads, one link word.
_HEADER_SIZE = _WORD * (5 + 2 * _MAX_ORDERS + 1)
_HEADER_ALIGN = _WORD
# A free page stores two link words, so a page must be at least that large.
_LINK_SIZE = 2 * _WORD


def _round_down(x: int, n: int) -> int:
    return x - x % n


def _round_up(x: int, n: int) -> int:
    return _round_down(x + n - 1, n)


def left(i: int) -> int:
    """Index of the left child of tree node ``i``."""
    return i * 2


def right(i: int) -> int:
    """Index of the right child of tree node ``i``."""
    return left(i) + 1


def father(i: int) -> int:
    """Index of the parent of tree node ``i``."""
    return i // 2


def buddy_index(i: int) -> int:
    """Index of the sibling of tree node ``i``."""
    return i ^ 1


def _validate_page_size(page_size: int) -> None:
    if page_size <= 0 or page_size & (page_size - 1):
        raise ValueError(f"page size must be a power of two, got {page_size}")
    if page_size < _LINK_SIZE:
        raise ValueError(
            f"page size must be at least {_LINK_SIZE} bytes, got {page_size}"
        )


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


class BuddySystem:
    """A buddy allocator managing ``2**max_order`` pages."""

    def __init__(
        self,
        *,
        start: int,
        page_size: int,
        max_order: int,
        bitmap_begin: int,
        page_begin: int,
        page_end: int,
    ) -> None:
        self.start = start
        self.page_size = page_size
        self.max_order = max_order
        self.npages = 1 << max_order
        self.bitmap_begin = bitmap_begin
        self.page_begin = page_begin
        self.page_end = page_end
        self._bitmap = bytearray(_round_up(2 * self.npages, 8) // 8)
        self._freelists: List[RawList] = [RawList() for _ in range(_MAX_ORDERS)]
        self._free_nodes: dict[int, RawNode] = {}
        self._push_free(max_order, page_begin)

    @classmethod
    def build(cls, begin: int, end: int, page_size: int) -> "BuddySystem":
        """Build a buddy system over ``[begin, end)``.

        Raises ValueError if the range cannot hold even one page.
        """
        _validate_page_size(page_size)
        start = _round_up(begin, _HEADER_ALIGN)
        bitmap_begin = start + _HEADER_SIZE
        if bitmap_begin >= end:
            raise ValueError("memory range too small for a buddy system")

        best: Optional[tuple[int, int, int]] = None
        for order in range(_MAX_ORDERS):
            n = 1 << order
            bitmap_end = bitmap_begin + _round_up(2 * n, 8) // 8
            page_begin = _round_up(bitmap_end, page_size)
            page_end = page_begin + n * page_size
            if page_end > end:
                break
            best = (order, page_begin, page_end)
        if best is None:
            raise ValueError("memory range too small for a buddy system")

        max_order, page_begin, page_end = best
        return cls(
            start=start,
            page_size=page_size,
            max_order=max_order,
            bitmap_begin=bitmap_begin,
            page_begin=page_begin,
            page_end=page_end,
        )

    # -- bitmap -------------------------------------------------------------

    def _set_bit(self, i: int) -> None:
        self._bitmap[i // 8] |= 1 << (i % 8)

    def _unset_bit(self, i: int) -> None:
        self._bitmap[i // 8] &= ~(1 << (i % 8)) & 0xFF

    def _get_bit(self, i: int) -> bool:
        return bool((self._bitmap[i // 8] >> (i % 8)) & 1)

    def _bitmap_index(self, addr: int, order: int) -> int:
        return (1 << (self.max_order - order)) + (
            ((addr - self.page_begin) // self.page_size) >> order
        )

    # -- free lists ---------------------------------------------------------

    def _push_free(self, order: int, addr: int) -> None:
        node = RawNode(addr)
        self._free_nodes[addr] = node
        self._freelists[order].push_front(node)

    def _pop_free(self, order: int) -> int:
        node = self._freelists[order].pop_front()
        del self._free_nodes[node.value]
        return node.value

    def _drop_free(self, addr: int) -> None:
        self._free_nodes.pop(addr).unlink()

    def _free_addresses(self, order: int) -> Iterator[int]:
        return (node.value for node in self._freelists[order])

    # -- allocation ---------------------------------------------------------

    def contains(self, addr: int) -> bool:
        """Whether ``addr`` lies within the pages of this system."""
        return self.page_begin <= addr < self.page_end

    def alloc_order(self, order: int) -> Optional[int]:
        """Allocate ``2**order`` pages; return the address or None."""
        for d in range(order, self.max_order + 1):
            if self._freelists[d].is_empty():
                continue
            addr = self._pop_free(d)
            i = self._bitmap_index(addr, d)
            self._set_bit(i)
            while d > order:
                d -= 1
                self._push_free(d, addr + (1 << d) * self.page_size)
                i = left(i)
                self._set_bit(i)
            return addr
        return None

    def free(self, addr: int, order: int) -> int:
        """Free the block at ``addr`` of ``order``; return the merged order."""
        if not 0 <= order <= self.max_order:
            raise ValueError(f"order {order} out of range for this buddy system")
        if not self.contains(addr):
            raise ValueError("address does not belong to this buddy system")
        i = self._bitmap_index(addr, order)
        p = addr
        while i != 1 and not self._get_bit(buddy_index(i)):
            block = (1 << order) * self.page_size
            bp = p + block if i < buddy_index(i) else p - block
            self._drop_free(bp)
            self._unset_bit(i)
            order += 1
            i = father(i)
            p = min(p, bp)
        self._unset_bit(i)
        self._push_free(order, p)
        return order

    def alloc(self, layout: Layout) -> Optional[int]:
        """Allocate memory fitting ``layout``; return the address or None."""
        return self.alloc_order(to_order(self.page_size, layout))

    def dealloc(self, addr: int, layout: Layout) -> None:
        """Free memory at ``addr`` that was allocated with ``layout``."""
        self.free(addr, to_order(self.page_size, layout))

    def check(self) -> None:
        """Verify the tree and free lists agree; raise AssertionError if not.

        - 1-nodes without any 1-node child are allocated chunks.
        - The root 0-node, and 0-nodes whose father and buddy are 1-nodes,
          are free chunks.
        - Children of a 0-node are 0-nodes.
        """
        free_sets: List[Set[int]] = [
            set(self._free_addresses(d)) for d in range(self.max_order + 1)
        ]
        nalloc = 0
        nfree = 0
        for u in range(1, self.npages * 2):
            tag = self._get_bit(u)
            d = self.max_order - (u.bit_length() - 1)
            lu, ru = left(u), right(u)
            npages = 1 << d
            addr = self.page_begin + npages * self.page_size * (
                u - (1 << (self.max_order - d))
            )

            if tag and (d == 0 or (not self._get_bit(lu) and not self._get_bit(ru))):
                nalloc += npages

            if not tag and (
                u == 1 or (self._get_bit(father(u)) and self._get_bit(buddy_index(u)))
            ):
                _check(
                    addr in free_sets[d],
                    f"free block {addr:#x} of order {d} missing from free list",
                )
                nfree += npages

            if d != 0 and not tag:
                _check(
                    not self._get_bit(lu) and not self._get_bit(ru),
                    f"free node {u} has an allocated child",
                )

        nfreelist = sum(len(s) << d for d, s in enumerate(free_sets))
        _check(nfree == nfreelist, "free lists disagree with the bitmap")
        _check(nalloc + nfree == self.npages, "pages are lost or double counted")


class MultiBuddySystem:
    """Allocator holding several buddy systems."""

    def __init__(self, page_size: int) -> None:
        _validate_page_size(page_size)
        self.page_size = page_size
        self._systems: List[BuddySystem] = []

    @property
    def systems(self) -> tuple[BuddySystem, ...]:
        """Registered buddy systems, most recently added first."""
        return tuple(self._systems)

    def add_zone(self, begin: int, end: int) -> None:
        """Add ``[begin, end)``, building buddy systems until none fits.

        Each system handles a power of two of pages, so the memory left over
        by one system is handed to the next.  Raises ValueError if the zone
        overlaps memory already added.
        """
        if self.overlap(begin, end):
            raise ValueError("zone overlaps an existing buddy system")
        while True:
            try:
                system = BuddySystem.build(begin, end, self.page_size)
            except ValueError:
                break
            self._systems.insert(0, system)
            begin = system.page_end
        self.check()

    def alloc_order(self, order: int) -> Optional[int]:
        """Allocate ``2**order`` pages from the first zone that can."""
        for system in self._systems:
            addr = system.alloc_order(order)
            if addr is not None:
                return addr
        return None

    def alloc(self, layout: Layout) -> Optional[int]:
        return self.alloc_order(to_order(self.page_size, layout))

    def free(self, addr: int, order: int) -> int:
        """Free a block; return its order after merging with buddies."""
        for system in self._systems:
            if system.contains(addr):
                return system.free(addr, order)
        raise ValueError("pointer doesn't fall into any buddy system")

    def dealloc(self, addr: int, layout: Layout) -> None:
        self.free(addr, to_order(self.page_size, layout))

    def check(self) -> None:
        """Verify that no two buddy systems overlap."""
        for system in self._systems:
            _check(
                not self.overlap(system.start, system.page_end, system),
                "buddy systems overlap",
            )

    def overlap(
        self, begin: int, end: int, ignore: Optional[BuddySystem] = None
    ) -> bool:
        """Whether ``[begin, end)`` meets any system other than ``ignore``."""
        return any(
            not (system.page_end <= begin or end <= system.start)
            for system in self._systems
            if system is not ignore
        )


class Allocator:
    """Thread-safe allocator over several buddy systems."""

    def __init__(self, page_size: int) -> None:
        self._inner = MultiBuddySystem(page_size)
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