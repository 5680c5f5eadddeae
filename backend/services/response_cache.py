"""Bounded in-memory cache of generated replies."""
import logging
from collections import OrderedDict
from typing import Optional

from config import CACHE_CAPACITY

logger = logging.getLogger(__name__)


class ResponseCache:
    """
    Map of normalized query -> reply text with FIFO eviction.

    Eviction removes the earliest inserted entry once capacity is exceeded;
    lookups do not refresh an entry's position.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self.capacity = capacity
        self._entries: "OrderedDict[str, str]" = OrderedDict()

    @staticmethod
    def normalize(query: str) -> str:
        """Lower-case and trim a query for use as a cache key."""
        return query.lower().strip()

    def get(self, query: str) -> Optional[str]:
        """Return the cached reply for a query, or None on a miss."""
        return self._entries.get(self.normalize(query))

    def put(self, query: str, reply: str) -> None:
        """
        Cache a reply for a query.

        Updating an existing key keeps its original insertion position.
        """
        key = self.normalize(query)
        self._entries[key] = reply

        if len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cache entry: {evicted[:50]}")

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, query: str) -> bool:
        return self.normalize(query) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
