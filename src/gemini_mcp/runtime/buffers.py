"""Bounded diagnostic buffers.

A verbose child must not grow memory without limit, and it must not be
blocked on a full pipe either: once a buffer is full, further input is read
and dropped rather than refused.
"""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

__all__ = [
    "CappedList",
    "BoundedTextBuffer",
    "TRUNCATION_MARKER",
]

T = TypeVar("T")

TRUNCATION_MARKER = "\n... (stderr truncated)"


class CappedList(Generic[T]):
    """Append-only list that silently ignores items past ``capacity``."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.capacity = capacity
        self._items: list[T] = []

    def append(self, item: T) -> bool:
        """Append ``item`` if there is room. Returns True if it was kept."""
        if len(self._items) >= self.capacity:
            return False
        self._items.append(item)
        return True

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def to_list(self) -> list[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


class BoundedTextBuffer:
    """Newline-joined text buffer capped at ``max_bytes`` of UTF-8.

    When a line does not fit, the fitting prefix is kept, a single
    truncation marker is appended and every later line is discarded.
    """

    def __init__(self, max_bytes: int, marker: str = TRUNCATION_MARKER) -> None:
        self.max_bytes = max_bytes
        self.marker = marker
        self._parts: list[str] = []
        self._size = 0
        self.truncated = False

    def append_line(self, line: str) -> None:
        if self.truncated:
            return
        if self._size >= self.max_bytes:
            self._parts.append(self.marker)
            self.truncated = True
            return

        encoded = line.encode("utf-8")
        if self._parts:
            encoded = b"\n" + encoded

        remaining = self.max_bytes - self._size
        if len(encoded) <= remaining:
            self._parts.append(encoded.decode("utf-8"))
            self._size += len(encoded)
            return

        # Cut on a character boundary
        head = encoded[:remaining].decode("utf-8", errors="ignore")
        self._parts.append(head)
        self._parts.append(self.marker)
        self._size += len(head.encode("utf-8"))
        self.truncated = True

    @property
    def size(self) -> int:
        """Captured bytes, excluding the truncation marker."""
        return self._size

    def getvalue(self) -> str:
        return "".join(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)
