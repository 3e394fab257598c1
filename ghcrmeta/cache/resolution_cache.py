"""Session cache for resolved registry metadata."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, Optional, Tuple, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')

MISS = object()

ORG_LISTING_KEY = 'org'


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the time it was fetched."""
    value: T
    fetched_at: float


def is_fresh(entry: CacheEntry, ttl: Optional[float], now: float) -> bool:
    """An entry is fresh iff now - fetched_at < ttl; no ttl means session lifetime."""
    if ttl is None:
        return True
    return now - entry.fetched_at < ttl


class CacheTable(Generic[T]):
    """One keyed table with its own lock and TTL."""

    def __init__(self, name: str, ttl: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[Hashable, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any:
        """Return the fresh value for key, or MISS."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISS
            if not is_fresh(entry, self.ttl, self.clock()):
                del self._entries[key]
                return MISS
            return entry.value

    def put(self, key: Hashable, value: T):
        with self._lock:
            self._entries[key] = CacheEntry(value=value, fetched_at=self.clock())

    def invalidate(self, key: Hashable) -> bool:
        """Drop one key; returns whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[Hashable], bool]) -> int:
        """Drop every key matching predicate; returns how many were dropped."""
        with self._lock:
            keys = [key for key in self._entries if predicate(key)]
            for key in keys:
                del self._entries[key]
            return len(keys)



class ResolutionCache:
    """The four cache tables shared by one resolver session.

    Tokens and tag lists are keyed by repository path, descriptions by
    (repository path, tag), and the org listing is a singleton. Descriptions
    taken from the source Dockerfile share the descriptions table under
    (repository path, tag, 'dockerfile') so a reload drops them too.
    """

    def __init__(self, org_listing_ttl: Optional[float] = 600.0,
                 resolution_ttl: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.org_listing = CacheTable('org_listing', org_listing_ttl, clock)
        self.tokens = CacheTable('tokens', resolution_ttl, clock)
        self.tags = CacheTable('tags', resolution_ttl, clock)
        self.descriptions = CacheTable('descriptions', resolution_ttl, clock)

    def reload(self, repositories: Iterable[str]) -> Dict[str, int]:
        """Invalidate token, tag and description entries for these repositories only."""
        targets = set(repositories)
        dropped = {'tokens': 0, 'tags': 0, 'descriptions': 0}

        for repository in targets:
            if self.tokens.invalidate(repository):
                dropped['tokens'] += 1
            if self.tags.invalidate(repository):
                dropped['tags'] += 1

        dropped['descriptions'] = self.descriptions.invalidate_where(
            lambda key: isinstance(key, tuple) and key[0] in targets
        )

        logger.info(f"Reloaded {len(targets)} repositories: {dropped}")
        return dropped

    def invalidate_org_listing(self) -> bool:
        return self.org_listing.invalidate(ORG_LISTING_KEY)

    @staticmethod
    def description_key(repository: str, tag: str) -> Tuple[str, str]:
        return (repository, tag)

    @staticmethod
    def fallback_key(repository: str, tag: str) -> Tuple[str, str, str]:
        return (repository, tag, 'dockerfile')
