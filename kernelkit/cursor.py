"""Read-only cursor over a :class:`LinkedList`.

A cursor rests on an element or on a "ghost" non-element that sits
between the tail and the head, so movement is logically circular.
"""

from __future__ import annotations

from typing import Any, Optional

from .linkedlist import LinkedList, _Node

__all__ = ["Cursor"]


class Cursor:
    """A cursor that can move freely back and forth over a list."""

    __slots__ = ("_list", "_current", "_index")

    def __init__(self, lst: LinkedList, current: Optional[_Node], index: int) -> None:
        self._list = lst
        self._current = current
        self._index = index

    @classmethod
    def front(cls, lst: LinkedList) -> "Cursor":
        """Cursor at the first element, or the ghost if ``lst`` is empty."""
        return cls(lst, lst._head, 0)

    @classmethod
    def back(cls, lst: LinkedList) -> "Cursor":
        """Cursor at the last element, or the ghost if ``lst`` is empty."""
        return cls(lst, lst._tail, max(len(lst) - 1, 0))

    def index(self) -> Optional[int]:
        """Position of the cursor, or None at the ghost."""
        return None if self._current is None else self._index

    def move_next(self) -> None:
        """Move to the next element; from the ghost, to the head."""
        if self._current is None:
            self._current = self._list._head
            self._index = 0
        else:
            self._current = self._current.next
            self._index += 1

    def move_prev(self) -> None:
        """Move to the previous element; from the ghost, to the tail."""
        if self._current is None:
            self._current = self._list._tail
            self._index = max(len(self._list) - 1, 0)
        else:
            self._current = self._current.prev
            self._index = self._index - 1 if self._index > 0 else len(self._list)

    def current(self) -> Any:
        """Element under the cursor, or None at the ghost."""
        return None if self._current is None else self._current.element

    def peek_next(self) -> Any:
        """Element after the cursor; the head when at the ghost."""
        node = self._list._head if self._current is None else self._current.next
        return None if node is None else node.element

    def peek_prev(self) -> Any:
        """Element before the cursor; the tail when at the ghost."""
        node = self._list._tail if self._current is None else self._current.prev
        return None if node is None else node.element

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._list!r}, index={self.index()!r})"