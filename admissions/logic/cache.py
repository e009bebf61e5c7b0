"""
Recommendation Cache

In-memory TTL cache of recommendation bundles keyed by student profile id.
Reduces database queries on repeat page visits. Entries are an optimization
only: a cold cache can always rebuild the same bundle from source data.

One instance is created per process (see main.py) and handed to request
handlers through a FastAPI dependency. There is no locking; concurrent writers
for the same profile resolve as last-writer-wins.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# Recommendations change infrequently
DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class CacheEntry:
    bundle: Any
    cached_at: float


class RecommendationCache:
    """
    TTL map of profile id -> bundle.

    Args:
        ttl_seconds: Age after which an entry is treated as absent
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, profile_id: str) -> Optional[Any]:
        """Return the cached bundle, evicting it if it has expired."""
        entry = self._entries.get(profile_id)
        if entry is None:
            return None

        if self._clock() - entry.cached_at > self.ttl_seconds:
            self._entries.pop(profile_id, None)
            logger.debug("Recommendation cache expired for profile %s", profile_id)
            return None

        return entry.bundle

    def set(self, profile_id: str, bundle: Any) -> None:
        self._entries[profile_id] = CacheEntry(bundle=bundle, cached_at=self._clock())

    def invalidate(self, profile_id: str) -> None:
        """Drop the entry for a profile (call whenever scorer inputs change)."""
        self._entries.pop(profile_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, profile_id: str) -> bool:
        return self.get(profile_id) is not None
