"""Page orders for allocation requests."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Layout", "to_order"]


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def _next_power_of_two(n: int) -> int:
    """Smallest power of two not below ``n``; zero maps to one."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


@dataclass(frozen=True)
class Layout:
    """Size and alignment of a requested block of memory."""

    size: int
    align: int = 1

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"layout size must not be negative, got {self.size}")
        if not _is_power_of_two(self.align):
            raise ValueError(f"layout align must be a power of two, got {self.align}")


def to_order(pgsize: int, layout: Layout) -> int:
    """Return the smallest order such that ``2**order`` pages hold ``layout``."""
    if not _is_power_of_two(pgsize):
        raise ValueError(f"page size must be a power of two, got {pgsize}")
    needed = max(_next_power_of_two(layout.size), layout.align)
    npages = (needed + pgsize - 1) // pgsize
    return (npages & -npages).bit_length() - 1