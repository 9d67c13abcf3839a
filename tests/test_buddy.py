import random

import pytest

from kernelkit.buddy import (
    Allocator,
    BuddySystem,
    MultiBuddySystem,
    buddy_index,
    father,
    left,
    right,
)
from kernelkit.order import Layout

PGSIZE = 64
NBUF = 10 * 4096
MEM_BEGIN = 0x100000
MEM_END = MEM_BEGIN + NBUF

LAYOUTS = [
    Layout(4, 2),
    Layout(5, 4),
    Layout(2 * PGSIZE, PGSIZE),
    Layout(PGSIZE, PGSIZE),
]


def _layout(order):
    size = (1 << order) * PGSIZE
    return Layout(size, size)


def _disjoint(blocks):
    spans = sorted((addr, addr + layout.size) for addr, layout in blocks)
    return all(a_end <= b_start for (_, a_end), (b_start, _) in zip(spans, spans[1:]))


def _alloc_some(a, orders, rng):
    result = []
    while True:
        ly = _layout(rng.choice(orders))
        addr = a.alloc(ly)
        if addr is None:
            return result
        result.append((addr, ly))


def _free_some(a, blocks, rng):
    blocks = list(blocks)
    rng.shuffle(blocks)
    for addr, ly in blocks:
        a.dealloc(addr, ly)


def _capacity(a):
    """Number of single pages the allocator can hand out; frees them again."""
    pages = []
    while (addr := a.alloc(_layout(0))) is not None:
        pages.append(addr)
    for addr in pages:
        a.dealloc(addr, _layout(0))
    return len(pages)


def test_utils():
    assert left(1) == 2
    assert left(2) == 4
    assert left(3) == 6
    assert right(1) == 3
    assert right(2) == 5
    assert right(3) == 7
    assert father(6) == 3
    assert father(7) == 3
    assert buddy_index(6) == 7
    assert buddy_index(7) == 6


def test_build_properties():
    b = BuddySystem.build(MEM_BEGIN, MEM_END, PGSIZE)
    assert MEM_BEGIN < b.page_end <= MEM_END
    assert b.page_begin % PGSIZE == 0
    assert b.page_end - b.page_begin == b.npages * PGSIZE
    assert b.npages == 1 << b.max_order
    b.check()


def test_build_too_small():
    with pytest.raises(ValueError):
        BuddySystem.build(MEM_BEGIN, MEM_BEGIN + 100, PGSIZE)


def test_build_rejects_bad_page_size():
    with pytest.raises(ValueError):
        BuddySystem.build(MEM_BEGIN, MEM_END, 48)
    with pytest.raises(ValueError):
        BuddySystem.build(MEM_BEGIN, MEM_END, 8)


def test_buddy():
    b = BuddySystem.build(MEM_BEGIN, MEM_END, PGSIZE)
    b.check()
    to_dealloc = []
    for ly in LAYOUTS:
        addr = b.alloc(ly)
        assert addr is not None
        assert b.page_begin <= addr < b.page_end
        to_dealloc.append((addr, ly))
        b.check()

    while (addr := b.alloc(Layout(PGSIZE, PGSIZE))) is not None:
        to_dealloc.append((addr, Layout(PGSIZE, PGSIZE)))
        b.check()

    assert _disjoint(to_dealloc)
    used = sum(max(1, -(-ly.size // PGSIZE)) for _, ly in to_dealloc)
    assert used == b.npages

    for addr, ly in to_dealloc:
        b.dealloc(addr, ly)
        b.check()

    assert b.alloc_order(b.max_order) == b.page_begin


def test_free_returns_merged_order():
    b = BuddySystem.build(MEM_BEGIN, MEM_END, PGSIZE)
    first = b.alloc_order(0)
    second = b.alloc_order(0)
    assert first == b.page_begin
    assert second == b.page_begin + PGSIZE
    assert b.free(first, 0) == 0
    b.check()
    assert b.free(second, 0) == b.max_order
    b.check()


def test_alloc_order_too_large():
    b = BuddySystem.build(MEM_BEGIN, MEM_END, PGSIZE)
    assert b.alloc_order(b.max_order + 1) is None
    assert b.alloc_order(b.max_order) == b.page_begin
    assert b.alloc_order(0) is None


def test_free_outside_range():
    b = BuddySystem.build(MEM_BEGIN, MEM_END, PGSIZE)
    with pytest.raises(ValueError):
        b.free(b.page_end, 0)


@pytest.mark.parametrize("shift", range(8))
def test_misaligned_build(shift):
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN + shift, MEM_END)
    assert m.systems
    for system in m.systems:
        assert system.start >= MEM_BEGIN + shift
        assert system.page_end <= MEM_END
        assert system.page_begin % PGSIZE == 0
        system.check()


def test_add_zone_twice_fails():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_END)
    with pytest.raises(ValueError):
        m.add_zone(MEM_BEGIN, MEM_END)


def test_add_zone_fills_leftover():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_END)
    systems = m.systems
    assert len(systems) > 1
    assert systems[-1].start == MEM_BEGIN
    for newer, older in zip(systems, systems[1:]):
        assert newer.start >= older.page_end
    m.check()


def test_overlap():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_END)
    oldest = m.systems[-1]
    assert m.overlap(MEM_BEGIN, MEM_BEGIN + 1)
    assert not m.overlap(MEM_END, MEM_END + 4096)
    assert not m.overlap(MEM_BEGIN - 4096, MEM_BEGIN)
    assert m.overlap(oldest.start, oldest.page_end)
    if len(m.systems) == 1:
        assert not m.overlap(oldest.start, oldest.page_end, oldest)


def test_multi_buddy():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_END)
    total = sum(s.npages for s in m.systems)

    to_dealloc = []
    for ly in LAYOUTS:
        addr = m.alloc(ly)
        assert addr is not None
        to_dealloc.append((addr, ly))

    while (addr := m.alloc(Layout(PGSIZE, PGSIZE))) is not None:
        to_dealloc.append((addr, Layout(PGSIZE, PGSIZE)))

    assert _disjoint(to_dealloc)
    used = sum(max(1, -(-ly.size // PGSIZE)) for _, ly in to_dealloc)
    assert used == total

    for addr, ly in to_dealloc:
        m.dealloc(addr, ly)

    for system in m.systems:
        system.check()
        assert system.alloc_order(system.max_order) == system.page_begin


def test_multi_free_unknown_pointer():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_END)
    with pytest.raises(ValueError):
        m.free(MEM_END + 4096, 0)


def test_empty_zone_allocates_nothing():
    m = MultiBuddySystem(PGSIZE)
    m.add_zone(MEM_BEGIN, MEM_BEGIN + 100)
    assert m.systems == ()
    assert m.alloc(Layout(PGSIZE, PGSIZE)) is None


@pytest.mark.parametrize("orders", [range(0, 2), range(0, 10)])
def test_allocator(orders):
    rng = random.Random(7)
    a = Allocator(PGSIZE)
    a.add_zone(MEM_BEGIN, MEM_BEGIN + PGSIZE * 1000)
    before = _capacity(a)
    assert before > 0

    blocks = _alloc_some(a, list(orders), rng)
    assert blocks
    assert _disjoint(blocks)
    half = len(blocks) // 2
    _free_some(a, blocks[half:], rng)
    blocks = blocks[:half] + _alloc_some(a, list(orders), rng)
    assert _disjoint(blocks)
    _free_some(a, blocks, rng)

    assert _capacity(a) == before