# kernelkit

Building blocks for experimenting with operating-system kernel memory
management, modelled in plain Python. Addresses are plain integers; the
allocators keep their bookkeeping in Python objects while laying out each
address range the way an in-place allocator would.

## What is inside

- `kernelkit.order`: `Layout(size, align)` and `to_order(pgsize, layout)`,
  which turn a size/alignment request into the smallest power-of-two page
  order that holds it. `Layout` raises `ValueError` for a negative size or an
  alignment that is not a power of two.
- `kernelkit.rawlist`: `RawList` and `RawNode`, a circular intrusive
  doubly-linked list with a sentinel head. `pop_front` and `pop_back` raise
  `IndexError` on an empty list.
- `kernelkit.buddy`: `BuddySystem`, `MultiBuddySystem` and a thread-safe
  `Allocator`. Allocation and deallocation run in O(log n). The helpers
  `left`, `right`, `father` and `buddy_index` navigate the allocation tree.
  `BuddySystem.check()` and `MultiBuddySystem.check()` verify internal
  invariants and raise `AssertionError` if they are broken.
- `kernelkit.cached`: `CachedBuddySystem` and its thread-safe `Allocator`.
  Freed blocks are kept in per-order caches, so deallocation is O(1) and most
  allocations are too; cached blocks are handed back to the buddy systems only
  when they run dry.
- `kernelkit.linkedlist`: `LinkedList`, an owned doubly-linked list with O(1)
  pushes and pops at both ends, `append`/`prepend` of whole lists,
  `split_off`, `remove`, ordering and equality.
- `kernelkit.cursor`: `Cursor`, a read-only cursor over a `LinkedList` that
  moves in both directions and passes through a "ghost" position between the
  tail and the head.
- `kernelkit.utils`: `round_down`, `round_up` and `intersect` for half-open
  `range` objects.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## A short tour

Page orders:

```python
from kernelkit.order import Layout, to_order

assert to_order(64, Layout(size=128, align=64)) == 1   # two pages
assert to_order(64, Layout(size=4, align=2)) == 0      # one page
```

Allocating pages from a zone of address space:

```python
from kernelkit.buddy import Allocator
from kernelkit.order import Layout

alloc = Allocator(page_size=64)
alloc.add_zone(0x10000, 0x10000 + 64 * 1000)

layout = Layout(size=128, align=64)
addr = alloc.alloc(layout)      # None when no block is left
alloc.dealloc(addr, layout)
```

`MultiBuddySystem.add_zone` raises `ValueError` when a zone overlaps memory
already added, and `free` raises `ValueError` for an address outside every
buddy system. `BuddySystem.build` raises `ValueError` when the range is too
small to hold a single page.

The cached allocator has the same interface:

```python
from kernelkit.cached import Allocator as CachedAllocator

alloc = CachedAllocator(page_size=64)
alloc.add_zone(0x10000, 0x10000 + 64 * 1000)
```

An owned linked list and a cursor over it:

```python
from kernelkit.cursor import Cursor
from kernelkit.linkedlist import LinkedList

lst = LinkedList([1, 2, 3])
tail = lst.split_off(2)
assert list(lst) == [1, 2] and list(tail) == [3]

cur = Cursor.front(lst)
cur.move_next()
assert cur.current() == 2 and cur.index() == 1
cur.move_next()
assert cur.current() is None and cur.index() is None   # the ghost position
```

## What it does not do

The package covers memory allocation and list structures only. It has no
device or file-handle layer, no mount or path-walking namespace, no editing
cursor for inserting into or splicing the middle of a `LinkedList`, no
double-ended queue type, and no dedicated exception hierarchy: errors are
reported with the built-in `ValueError`, `IndexError` and `AssertionError`.
The allocators hand out integer addresses and never touch real memory.