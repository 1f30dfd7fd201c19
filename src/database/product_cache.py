"""
In-memory TTL cache for normalized products.

Entries live for the lifetime of the process only. An entry is valid while
`now - captured_at < ttl`; `get` never returns anything older and drops it.
`sweep` purges expired entries and `run_sweeper` calls it on a fixed interval
so memory stays bounded even for keys that are never read again.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from src.integrations.contracts.catalog import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    product: Product
    captured_at: float


class ProductCache:
    def __init__(self, ttl_seconds: float = 600.0, clock: Optional[Callable[[], float]] = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        # key ("<sku>-<market>") -> entry
        self._entries: Dict[str, CacheEntry] = {}

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.captured_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[Product]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.product

    def put(self, key: str, product: Product) -> None:
        self._entries[key] = CacheEntry(product=product, captured_at=self._clock())

    def sweep(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in expired:
            del self._entries[key]
            logger.debug("Cleaned up expired cache entry: %s", key)
        return len(expired)

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Sweep forever; meant to run as a background task."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.info("Cache sweep removed %d expired entries", removed)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
