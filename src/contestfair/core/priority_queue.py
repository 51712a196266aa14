"""Array-backed binary heap ordered by a caller-supplied comparator."""

from __future__ import annotations

from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")

Comparator = Callable[[T, T], float]


class PriorityQueue(Generic[T]):
    """Binary heap keeping the "smallest" item (per ``cmp``) at the root.

    ``cmp(a, b)`` returns a negative number when ``a`` should leave the queue
    before ``b``, zero when they tie and a positive number otherwise. Supply an
    inverted comparator for max-heap behaviour. Ties are not stable: encode any
    tie-break (such as earliest registration first) in the comparator.
    """

    def __init__(self, cmp: Comparator[T]) -> None:
        self._heap: list[T] = []
        self._cmp = cmp

    @classmethod
    def from_iterable(cls, items: Iterable[T], cmp: Comparator[T]) -> "PriorityQueue[T]":
        queue: PriorityQueue[T] = cls(cmp)
        for item in items:
            queue.enqueue(item)
        return queue

    def enqueue(self, item: T) -> None:
        self._heap.append(item)
        self._sift_up(len(self._heap) - 1)

    def dequeue(self) -> T | None:
        """Remove and return the root item, or ``None`` when empty."""
        if not self._heap:
            return None
        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return root

    def peek(self) -> T | None:
        return self._heap[0] if self._heap else None

    def is_empty(self) -> bool:
        return not self._heap

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def get_all(self) -> list[T]:
        """Return a shallow copy of the items in heap order (not sorted)."""
        return list(self._heap)

    def take(self, count: int) -> list[T]:
        """Dequeue up to ``count`` items in priority order."""
        taken: list[T] = []
        while len(taken) < count and self._heap:
            taken.append(self.dequeue())  # type: ignore[arg-type]
        return taken

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = (index - 1) // 2
            if self._cmp(heap[index], heap[parent]) >= 0:
                break
            heap[index], heap[parent] = heap[parent], heap[index]
            index = parent

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            smallest = index
            left = 2 * index + 1
            right = left + 1
            if left < size and self._cmp(heap[left], heap[smallest]) < 0:
                smallest = left
            if right < size and self._cmp(heap[right], heap[smallest]) < 0:
                smallest = right
            if smallest == index:
                return
            heap[index], heap[smallest] = heap[smallest], heap[index]
            index = smallest


__all__ = ["Comparator", "PriorityQueue"]
