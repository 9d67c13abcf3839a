"""Circular intrusive doubly-linked list with a sentinel head."""

from __future__ import annotations

from typing import Any, Iterator, Optional

__all__ = ["RawNode", "RawList"]


class RawNode:
    """A list node that links itself into a :class:`RawList`."""

    __slots__ = ("prev", "next", "value")

    def __init__(self, value: Any = None) -> None:
        self.prev: RawNode = self
        self.next: RawNode = self
        self.value = value

    def _link_between(self, prev: RawNode, nxt: RawNode) -> None:
        nxt.prev = self
        self.next = nxt
        self.prev = prev
        prev.next = self

    def unlink(self) -> None:
        """Remove this node from whatever list holds it."""
        self.next.prev = self.prev
        self.prev.next = self.next
        self.prev = self
        self.next = self

    def __repr__(self) -> str:
        return f"RawNode({self.value!r})"


class RawList:
    """A circular list of :class:`RawNode` objects."""

    __slots__ = ("_head",)

    def __init__(self) -> None:
        self._head = RawNode()

    def is_empty(self) -> bool:
        return self._head.next is self._head

    def front(self) -> Optional[RawNode]:
        """First node, or None if the list is empty."""
        return None if self.is_empty() else self._head.next

    def back(self) -> Optional[RawNode]:
        """Last node, or None if the list is empty."""
        return None if self.is_empty() else self._head.prev

    def push_front(self, node: RawNode) -> None:
        node._link_between(self._head, self._head.next)

    def push_back(self, node: RawNode) -> None:
        node._link_between(self._head.prev, self._head)

    def pop_front(self) -> RawNode:
        if self.is_empty():
            raise IndexError("pop from an empty list")
        node = self._head.next
        node.unlink()
        return node

    def pop_back(self) -> RawNode:
        if self.is_empty():
            raise IndexError("pop from an empty list")
        node = self._head.prev
        node.unlink()
        return node

    def __iter__(self) -> Iterator[RawNode]:
        node = self._head.next
        while node is not self._head:
            following = node.next
            yield node
            node = following