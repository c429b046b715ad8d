"""
In-memory result cache keyed by the canonical query.

Entries expire lazily: an entry older than the TTL is dropped when it is
read. The entry map is shared between threads and guarded by a lock; the
per-key asyncio locks let concurrent identical searches wait for one
another instead of fanning out twice.
"""

import asyncio
import json
import logging
import threading
import time
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from travel_sourcing.models import AggregatedResults, TravelQuery

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0


@dataclass(frozen=True)
class CacheEntry:
    results: AggregatedResults
    stored_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.stored_at < ttl_seconds


def _canonical_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = " ".join(str(value).split()).casefold()
    return cleaned or None


def canonical_query(query: TravelQuery) -> Dict[str, Any]:
    """Normalize a query so equivalent searches share one cache entry."""
    payload = query.model_dump(mode="json")
    payload["origin"] = _canonical_text(query.origin)
    payload["destination"] = _canonical_text(query.destination) or ""
    return payload


class ResultCache:
    """TTL cache of AggregatedResults."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._entries_lock = threading.Lock()
        self._key_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def cache_key(query: Union[TravelQuery, str]) -> str:
        if isinstance(query, str):
            return query
        return json.dumps(canonical_query(query), sort_keys=True, separators=(",", ":"))

    def get(self, query: Union[TravelQuery, str]) -> Optional[AggregatedResults]:
        key = self.cache_key(query)
        now = self._clock()
        with self._entries_lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if not entry.is_fresh(now, self.ttl_seconds):
                del self._entries[key]
                self._misses += 1
                logger.debug("[Cache] Expired entry dropped")
                return None
            self._hits += 1
            return entry.results

    def put(self, query: Union[TravelQuery, str], results: AggregatedResults) -> None:
        key = self.cache_key(query)
        with self._entries_lock:
            self._entries[key] = CacheEntry(results=results, stored_at=self._clock())

    def lock(self, query: Union[TravelQuery, str]) -> asyncio.Lock:
        """Per-key lock; callers must hold a reference while using it."""
        key = self.cache_key(query)
        with self._entries_lock:
            key_lock = self._key_locks.get(key)
            if key_lock is None:
                key_lock = asyncio.Lock()
                self._key_locks[key] = key_lock
            return key_lock

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        with self._entries_lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": self.ttl_seconds,
            }

    def __len__(self) -> int:
        with self._entries_lock:
            return len(self._entries)
