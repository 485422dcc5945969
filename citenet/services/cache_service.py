"""In-process time-bounded cache shared by the upstream adapters."""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from cachetools import TLRUCache

from citenet.utils.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    ttl: float


def _expires_at(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class TTLCache:
    """Key/value store with a per-entry expiry, in seconds.

    Reads evict expired entries; ``start()`` additionally runs a background
    sweep every ``sweep_interval`` seconds so unread entries do not pile up.
    Concurrent writers to the same key resolve as last-write-wins. When
    ``max_entries`` is reached the least recently used entry is dropped.
    """

    def __init__(
        self,
        default_ttl: float = 3600.0,
        sweep_interval: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 50_000,
    ) -> None:
        self._entries: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_expires_at, timer=clock)
        self._lock = threading.Lock()
        self._default_ttl = default_ttl
        self._sweep_interval = sweep_interval
        self._sweeper: asyncio.Task[None] | None = None

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            self._entries.expire()
            entry = self._entries.get(key, _MISSING)
        if entry is _MISSING:
            logger.debug("cache_miss", key=key)
            return default
        logger.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        entry = CacheEntry(value=value, ttl=self._default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = entry
        logger.debug("cache_set", key=key, ttl=entry.ttl)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def sweep(self) -> int:
        """Evict every expired entry; returns how many were removed."""
        with self._lock:
            expired = self._entries.expire()
        if expired:
            logger.debug("cache_sweep", entries_removed=len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ── Background sweep ─────────────────────────────────────────────

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
