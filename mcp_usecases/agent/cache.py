import functools
import inspect
import time
from typing import Any, Dict, Tuple

from ..config import Config


class ToolCache:
    """Simple in-memory cache for read-only provider lookups with TTL expiration.

    Only wrap idempotent calls (searches, detail lookups). Bookings,
    reservations and anything else with side effects must stay uncached.
    Exceptions are not cached, so wrap the call that raises on provider
    failure rather than one that falls back to mock data.
    Works for both plain functions and coroutine functions.
    """

    def __init__(self, ttl_seconds: float = 300):
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._ttl = ttl_seconds

    def _key(self, func, args, kwargs) -> str:
        key_parts = [func.__qualname__]
        key_parts.extend(str(arg) for arg in args)
        key_parts.extend(f"{k}={v}" for k, v in sorted(kwargs.items()))
        return ":".join(key_parts)

    def _store(self, key: str, value: Any):
        now = time.time()
        expired = [k for k, (timestamp, _) in self._cache.items() if now - timestamp >= self._ttl]
        for k in expired:
            del self._cache[k]
        self._cache[key] = (now, value)

    def _lookup(self, key: str):
        if key in self._cache:
            timestamp, value = self._cache[key]
            if time.time() - timestamp < self._ttl:
                return True, value
            del self._cache[key]
        return False, None

    def cached(self, func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                key = self._key(func, args, kwargs)
                hit, value = self._lookup(key)
                if hit:
                    return value
                result = await func(*args, **kwargs)
                self._store(key, result)
                return result
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            key = self._key(func, args, kwargs)
            hit, value = self._lookup(key)
            if hit:
                return value
            result = func(*args, **kwargs)
            self._store(key, result)
            return result
        return wrapper

    def clear(self):
        self._cache.clear()

    def __len__(self):
        return len(self._cache)


global_tool_cache = ToolCache(ttl_seconds=Config.CACHE_TTL_SECONDS)
