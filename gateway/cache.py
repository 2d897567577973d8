from __future__ import annotations
"""Answer cache for the gateway.

ResponseCache – short-lived in-memory cache keyed by ``"chat:" + query``.
Entries expire a fixed TTL after insertion and are dropped lazily on lookup;
a TTL of 0 keeps entries forever.  There is no size bound.
"""

import asyncio
import time
from typing import Callable, Dict, Optional, Tuple

__all__ = [
    "ResponseCache",
    "cache_key",
]


def cache_key(query: str) -> str:
    # files are not part of the key
    return f"chat:{query}"


class ResponseCache:
    """Simple asyncio-safe TTL cache for query → answer."""

    def __init__(self, ttl_sec: float = 30, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_sec
        self._clock = clock
        self._store: Dict[str, Tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    # ------------------------------------------------------------------
    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            ts, val = entry
            if self._ttl > 0 and self._clock() - ts > self._ttl:
                # expired
                del self._store[key]
                return None
            return val

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._store[key] = (self._clock(), value)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
