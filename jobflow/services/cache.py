"""
In-Memory Response Cache

Time-bounded memoization in front of the upstream job API. One entry per
logical request; entries expire a fixed TTL after they were stored and
are never refreshed by reads (no sliding expiration).

Cache Key Patterns:
    - all_jobs              - GET /jobs
    - paginated_jobs_{page} - GET /jobs/paginated?page={page}
    - random_job            - GET /jobs/random
    - random_jobs_{count}   - GET /jobs/random/{count}

Usage:
    cache = ResponseCache()

    data = cache.get("all_jobs")
    if data is None:
        data = await fetch_all_jobs()
        cache.put("all_jobs", data)

The keyspace is bounded by the number of distinct logical queries, so
there is no size limit and no LRU eviction. Access is confined to one
event loop thread; there is no locking.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from jobflow.middleware.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

RESPONSE_TTL_SECONDS = 300  # 5 minutes


def cache_key(operation: str, *params: Any) -> str:
    """
    Build a logical request key from an operation name and its parameters.

    Examples:
        >>> cache_key("all_jobs")
        'all_jobs'
        >>> cache_key("paginated_jobs", 3)
        'paginated_jobs_3'
    """
    return "_".join([operation, *(str(p) for p in params)])


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    stored_at: float


class ResponseCache:
    """
    TTL cache keyed by logical request key.

    Attributes:
        ttl: Entry lifetime in seconds, measured from put()
        clock: Zero-arg callable returning the current time in seconds
        stats: Hit/miss counters
    """

    layer = "response"

    def __init__(
        self,
        ttl: float = RESPONSE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.stats: Dict[str, int] = {"hits": 0, "misses": 0}

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached payload for key, or None when absent or expired.

        An expired entry is evicted as a side effect.
        """
        entry = self._entries.get(key)
        if entry is not None and self.clock() - entry.stored_at < self.ttl:
            self.stats["hits"] += 1
            record_cache_hit(self.layer)
            return entry.data

        if entry is not None:
            logger.debug(f"Cache entry expired: {key}")
            del self._entries[key]

        self.stats["misses"] += 1
        record_cache_miss(self.layer)
        return None

    def put(self, key: str, data: Any) -> None:
        """Store data under key, overwriting any previous entry."""
        self._entries[key] = CacheEntry(data=data, stored_at=self.clock())

    def invalidate(self, key: str) -> bool:
        """
        Drop a single entry.

        Returns:
            True if an entry was removed
        """
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics including hit rate.

        Returns:
            Dict with hits, misses, total, hit_rate and current entry count
        """
        hits = self.stats["hits"]
        misses = self.stats["misses"]
        total = hits + misses
        return {
            "hits": hits,
            "misses": misses,
            "total": total,
            "hit_rate": hits / total if total > 0 else 0.0,
            "entries": len(self._entries),
        }

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
