"""Doubly-linked list with owned nodes."""

from __future__ import annotations

from functools import total_ordering
from typing import Any, Iterable, Iterator, Optional, Tuple

__all__ = ["LinkedList"]


class _Node:
    __slots__ = ("next", "prev", "element")

    def __init__(self, element: Any) -> None:
        self.next: Optional[_Node] = None
        self.prev: Optional[_Node] = None
        self.element = element


@total_ordering
class LinkedList:
    """A doubly-linked list supporting O(1) pushes and pops at both ends."""

    __slots__ = ("_head", "_tail", "_len")

    def __init__(self, iterable: Optional[Iterable[Any]] = None) -> None:
        self._head: Optional[_Node] = None
        self._tail: Optional[_Node] = None
        self._len = 0
        if iterable is not None:
            for item in iterable:
                self.push_back(item)

    # -- node-level helpers -------------------------------------------------

    @classmethod
    def _from_nodes(
        cls, head: Optional[_Node], tail: Optional[_Node], length: int
    ) -> "LinkedList":
        lst = cls()
        lst._head, lst._tail, lst._len = head, tail, length
        return lst

    def _take(self) -> "LinkedList":
        """Move every node into a new list, leaving this one empty."""
        taken = self._from_nodes(self._head, self._tail, self._len)
        self._head = self._tail = None
        self._len = 0
        return taken

    def _swap(self, other: "LinkedList") -> None:
        self._head, other._head = other._head, self._head
        self._tail, other._tail = other._tail, self._tail
        self._len, other._len = other._len, self._len

    def _node_at(self, index: int) -> _Node:
        if index <= self._len - 1 - index:
            node = self._head
            for _ in range(index):
                node = node.next
        else:
            node = self._tail
            for _ in range(self._len - 1 - index):
                node = node.prev
        return node

    def _unlink_node(self, node: _Node) -> None:
        if node.prev is not None:
            node.prev.next = node.next
        else:
            self._head = node.next
        if node.next is not None:
            node.next.prev = node.prev
        else:
            self._tail = node.prev
        self._len -= 1

    def _splice_nodes(
        self,
        existing_prev: Optional[_Node],
        existing_next: Optional[_Node],
        start: _Node,
        end: _Node,
        length: int,
    ) -> None:
        if existing_prev is not None:
            existing_prev.next = start
        else:
            self._head = start
        if existing_next is not None:
            existing_next.prev = end
        else:
            self._tail = end
        start.prev = existing_prev
        end.next = existing_next
        self._len += length

    def _detach_all_nodes(self) -> Optional[Tuple[_Node, _Node, int]]:
        head, tail, length = self._head, self._tail, self._len
        self._head = self._tail = None
        self._len = 0
        if head is None:
            return None
        return head, tail, length

    def _split_off_after_node(self, node: Optional[_Node], at: int) -> "LinkedList":
        if node is None:
            return self._take()
        second_head = node.next
        node.next = None
        if second_head is not None:
            second_head.prev = None
            second_tail = self._tail
        else:
            second_tail = None
        second = self._from_nodes(second_head, second_tail, self._len - at)
        self._tail = node
        self._len = at
        return second

    def _split_off_before_node(self, node: Optional[_Node], at: int) -> "LinkedList":
        if node is None:
            return self._take()
        first_tail = node.prev
        node.prev = None
        if first_tail is not None:
            first_tail.next = None
            first_head = self._head
        else:
            first_head = None
        first = self._from_nodes(first_head, first_tail, at)
        self._head = node
        self._len -= at
        return first

    # -- public interface ---------------------------------------------------

    def append(self, other: "LinkedList") -> None:
        """Move all elements of ``other`` to the end of this list."""
        if self._tail is None:
            self._swap(other)
            return
        if other._head is None:
            return
        self._tail.next = other._head
        other._head.prev = self._tail
        self._tail = other._tail
        self._len += other._len
        other._head = other._tail = None
        other._len = 0

    def prepend(self, other: "LinkedList") -> None:
        """Move all elements of ``other`` to the front of this list."""
        if self._head is None:
            self._swap(other)
            return
        if other._tail is None:
            return
        self._head.prev = other._tail
        other._tail.next = self._head
        self._head = other._head
        self._len += other._len
        other._head = other._tail = None
        other._len = 0

    def __iter__(self) -> Iterator[Any]:
        node = self._head
        while node is not None:
            yield node.element
            node = node.next

    def __reversed__(self) -> Iterator[Any]:
        node = self._tail
        while node is not None:
            yield node.element
            node = node.prev

    def __len__(self) -> int:
        return self._len

    def __contains__(self, x: Any) -> bool:
        return any(e == x for e in self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._len == other._len and all(a == b for a, b in zip(self, other))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return list(self) < list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"LinkedList({list(self)!r})"

    def is_empty(self) -> bool:
        return self._head is None

    def clear(self) -> None:
        self._head = self._tail = None
        self._len = 0

    def front(self) -> Any:
        """First element, or None if the list is empty."""
        return None if self._head is None else self._head.element

    def back(self) -> Any:
        """Last element, or None if the list is empty."""
        return None if self._tail is None else self._tail.element

    def push_front(self, elt: Any) -> None:
        node = _Node(elt)
        node.next = self._head
        if self._head is None:
            self._tail = node
        else:
            self._head.prev = node
        self._head = node
        self._len += 1

    def push_back(self, elt: Any) -> None:
        node = _Node(elt)
        node.prev = self._tail
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        self._len += 1

    def pop_front(self) -> Any:
        """Remove and return the first element, or None if empty."""
        node = self._head
        if node is None:
            return None
        self._head = node.next
        if self._head is None:
            self._tail = None
        else:
            self._head.prev = None
        self._len -= 1
        return node.element

    def pop_back(self) -> Any:
        """Remove and return the last element, or None if empty."""
        node = self._tail
        if node is None:
            return None
        self._tail = node.prev
        if self._tail is None:
            self._head = None
        else:
            self._tail.next = None
        self._len -= 1
        return node.element

    def split_off(self, at: int) -> "LinkedList":
        """Split at ``at``; return the elements from ``at`` onwards."""
        length = self._len
        if not 0 <= at <= length:
            raise IndexError("Cannot split off at a nonexistent index")
        if at == 0:
            return self._take()
        if at == length:
            return LinkedList()
        return self._split_off_after_node(self._node_at(at - 1), at)

    def remove(self, at: int) -> Any:
        """Remove and return the element at index ``at``."""
        if not 0 <= at < self._len:
            raise IndexError("Cannot remove at an index outside of the list bounds")
        node = self._node_at(at)
        self._unlink_node(node)
        node.next = node.prev = None
        return node.element