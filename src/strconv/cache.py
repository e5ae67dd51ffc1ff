"""
Process-wide caches for resolved descriptors and diagnostic type names.

Entries are written once per key and never replaced, so lookups need no
locking; insertion goes through a lock so concurrent first uses agree on a
single value.
"""
import logging
import threading
from typing import Any

import cachetools

logger = logging.getLogger(__name__)


class Cache:
    """Unified cache manager for the strconv package.

    Thread-safe singleton that manages all named caches.
    """

    _instance = None
    _caches: dict[str, cachetools.Cache] = {}
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'Cache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_cache(self, name: str, maxsize: int = 4096) -> cachetools.Cache:
        """Get or create a cache with the given name.

        Args:
            name: Name of the cache
            maxsize: Maximum cache size

        Returns
            cachetools.Cache instance
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    self._caches[name] = cachetools.Cache(maxsize=maxsize)
        return self._caches[name]

    def get_or_insert(self, name: str, key: Any, factory) -> Any:
        """Return the cached value for key, computing it on first use.

        The first value stored for a key wins; a value computed by a losing
        thread is discarded.
        """
        cache = self.get_cache(name)
        try:
            return cache[key]
        except KeyError:
            pass
        value = factory()
        with self._lock:
            if key in cache:
                return cache[key]
            cache[key] = value
            logger.debug(f'Cached {name} entry for {key!r}')
        return value

    def contains(self, name: str, key: Any) -> bool:
        return key in self.get_cache(name)

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()
