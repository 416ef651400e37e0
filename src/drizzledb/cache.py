"""
Caching for catalog introspection.

Provides a single, simple caching system for normalized catalog results.
Uses cachetools TTLCache for automatic expiration.
"""
import functools
import logging
import threading

import cachetools
from drizzledb.sql import unquote_identifier

logger = logging.getLogger(__name__)


class Cache:
    """Cache manager for the drizzledb package.

    Thread-safe singleton that manages all TTL caches.
    """

    _instance = None
    _caches: dict[str, cachetools.TTLCache] = {}
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'Cache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_cache(self, name: str, maxsize: int = 100, ttl: int = 300) -> cachetools.TTLCache:
        """Get or create a TTL cache with the given name.

        Args:
            name: Name of the cache
            maxsize: Maximum cache size
            ttl: Time-to-live in seconds

        Returns
            TTLCache instance
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    self._caches[name] = cachetools.TTLCache(maxsize=maxsize, ttl=ttl)
        return self._caches[name]

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def clear_cache(self, name: str) -> None:
        """Clear a specific cache by name."""
        with self._lock:
            if name in self._caches:
                self._caches[name].clear()

    def clear_for_table(self, table_name: str) -> None:
        """Clear all cache entries related to a specific table.

        Args:
            table_name: Name of the table to clear cache entries for
        """
        marker = f':{table_name.lower()}:'
        with self._lock:
            for cache in self._caches.values():
                keys_to_clear = [key for key in list(cache.keys()) if marker in key]
                for key in keys_to_clear:
                    cache.pop(key, None)
                    logger.debug(f'Cleared cache entry {key} for table {table_name}')


def _create_cache_key(scope: str, table_name: str, method_args: tuple, method_kwargs: dict) -> str:
    """Create a deterministic cache key from arguments."""
    args_str = ':'.join(repr(arg) for arg in method_args)
    kwargs_str = ':'.join(f'{k}={v!r}' for k, v in sorted(method_kwargs.items()))
    return f'{scope}:{table_name}:{args_str}:{kwargs_str}'.lower()


def cacheable_catalog(cache_name: str, ttl: int = 300, maxsize: int = 50):
    """Decorator for caching schema manager listings.

    Caches results keyed by the manager's connection scope, table name and
    method arguments. Respects bypass_cache parameter to skip cache lookup.
    The table name is unquoted before it reaches the key or the method, so
    `users` and users share one entry and are evicted together.

    Args:
        cache_name: Base name for the cache
        ttl: Time-to-live in seconds
        maxsize: Maximum cache size
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, table, *args, bypass_cache=False, **kwargs):
            table = unquote_identifier(table)
            if bypass_cache:
                logger.debug(f'Bypassing cache for {method.__name__}({table})')
                return method(self, table, *args, **kwargs)

            specific_cache_name = f'{cache_name}_{self.__class__.__name__}_{method.__name__}'
            cache = Cache.get_instance().get_cache(specific_cache_name, ttl=ttl, maxsize=maxsize)
            cache_key = _create_cache_key(self.cache_scope, table, args, kwargs)

            if cache_key in cache:
                logger.debug(f'Cache hit for {method.__name__}({table})')
                return cache[cache_key]

            logger.debug(f'Cache miss for {method.__name__}({table})')
            result = method(self, table, *args, **kwargs)
            cache[cache_key] = result
            return result

        return wrapper
    return decorator
