"""Bounded per-session histories."""

import time
from collections import deque
from typing import Deque, Generic, Iterator, List, Optional, TypeVar

from .config import Config

T = TypeVar("T")


def now_ms() -> int:
    """Wall clock in integer milliseconds."""
    return int(time.time() * 1000)


class TimeWindowedHistory(Generic[T]):
    """
    Append-only history of timestamped entries with eviction.

    Entries need an integer ``timestamp`` (ms). On every append, entries older
    than ``retention_ms`` relative to the newest timestamp are dropped, and the
    total size is capped at ``max_entries`` (oldest first). Not thread-safe:
    a history belongs to a single session.
    """

    def __init__(self, retention_ms: Optional[int] = None, max_entries: Optional[int] = None):
        self.retention_ms = retention_ms if retention_ms is not None else Config.history.RETENTION_MS
        self.max_entries = max_entries if max_entries is not None else Config.history.MAX_ENTRIES
        self._items: Deque[T] = deque(maxlen=self.max_entries)

    def append(self, item: T) -> None:
        self._items.append(item)
        self.evict(item.timestamp)

    def evict(self, reference_ms: int) -> int:
        """Drop entries with ``reference_ms - timestamp > retention_ms``; returns count dropped."""
        dropped = 0
        while self._items and reference_ms - self._items[0].timestamp > self.retention_ms:
            self._items.popleft()
            dropped += 1
        return dropped

    def items(self) -> List[T]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __bool__(self) -> bool:
        return bool(self._items)
