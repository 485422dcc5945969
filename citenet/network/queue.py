"""FIFO work queue for breadth-first traversal."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from citenet.utils.text_processing import identifier_key


@dataclass(frozen=True)
class WorkItem:
    id: str
    level: int


class WorkQueue:
    """First-in first-out queue that accepts each identifier at most once.

    The membership check and the insertion happen in one synchronous call, so
    coroutines enqueueing concurrently on the same event loop cannot admit an
    identifier twice.
    """

    def __init__(self) -> None:
        self._items: deque[WorkItem] = deque()
        self._seen: set[str] = set()

    def enqueue(self, node_id: str, level: int) -> bool:
        key = identifier_key(node_id)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._items.append(WorkItem(node_id, level))
        return True

    def dequeue(self) -> WorkItem:
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
