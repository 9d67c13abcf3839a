"""Kernel building blocks: buddy page allocators, linked lists and list cursors."""

__version__ = "0.1.0"

__all__ = [
    "buddy",
    "cached",
    "cursor",
    "linkedlist",
    "order",
    "rawlist",
    "utils",
]