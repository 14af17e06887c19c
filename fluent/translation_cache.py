"""
Translation cache abstraction and in-memory implementation
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str, str]


def make_cache_key(text: str, source_lang: str, target_lang: str) -> CacheKey:
    """Cache key for a text in a language pair"""
    return (text, source_lang.lower(), target_lang.lower())


@dataclass(frozen=True)
class TranslationCacheEntry:
    """A resolved translation; never modified after it is written"""

    translation: str
    provider: str
    resolved_at: datetime = field(default_factory=datetime.now)


@dataclass
class CacheStats:
    """Hit/miss counters for a cache"""

    hits: int = 0
    misses: int = 0
    writes: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class TranslationCache(ABC):
    """
    Storage for resolved translations.

    Implementations must keep at most one entry per key and must not
    overwrite an existing entry.
    """

    @abstractmethod
    def get(self, key: CacheKey) -> TranslationCacheEntry | None:
        """Return the entry for key, or None"""

    @abstractmethod
    def put_if_absent(self, key: CacheKey, entry: TranslationCacheEntry) -> TranslationCacheEntry:
        """Store entry unless key is present; return the entry now stored for key"""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored entries"""


class InMemoryTranslationCache(TranslationCache):
    """
    Process-lifetime cache. Thread safe.

    With max_entries set, the least recently used entry is evicted once the
    bound is exceeded; otherwise the cache grows without limit.
    """

    def __init__(self, max_entries: int | None = None):
        self._store: OrderedDict[CacheKey, TranslationCacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.max_entries = max_entries
        self.stats = CacheStats()

    def get(self, key: CacheKey) -> TranslationCacheEntry | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.stats.misses += 1
                return None
            self.stats.hits += 1
            if self.max_entries is not None:
                self._store.move_to_end(key)
            return entry

    def put_if_absent(self, key: CacheKey, entry: TranslationCacheEntry) -> TranslationCacheEntry:
        with self._lock:
            existing = self._store.get(key)
            if existing is not None:
                logger.debug(f"Cache entry for {key} already present, keeping it")
                return existing

            self._store[key] = entry
            self.stats.writes += 1

            if self.max_entries is not None:
                while len(self._store) > self.max_entries:
                    evicted_key, _ = self._store.popitem(last=False)
                    logger.debug(f"Evicted cache entry {evicted_key}")
            return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> list[CacheKey]:
        """List stored keys, for diagnostics and tests"""
        with self._lock:
            return list(self._store.keys())
