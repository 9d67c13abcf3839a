"""Small arithmetic helpers."""

from __future__ import annotations

__all__ = ["round_down", "round_up", "intersect"]


def round_down(x: int, n: int) -> int:
    """Round ``x`` down to the nearest multiple of ``n``."""
    return x - x % n


def round_up(x: int, n: int) -> int:
    """Round ``x`` up to the nearest multiple of ``n``."""
    return round_down(x + n - 1, n)


def intersect(a: range, b: range) -> bool:
    """Whether the half-open ranges ``a`` and ``b`` share any point."""
    return a.start < b.stop and a.stop > b.start