"""
Caching utilities for expensive aggregate queries.

Keys are namespaced by prefix and carry a per-prefix version number, so a
whole family of cached results is invalidated by bumping the version. This
works the same on Redis (django-redis) and on the local-memory backend.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging
import time

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
ORDER_ANALYTICS_CACHE_TTL = 300  # 5 minutes
DASHBOARD_CACHE_TTL = 300  # 5 minutes


def _version_key(prefix):
    return f"{prefix}:version"


def get_prefix_version(prefix):
    version = cache.get(_version_key(prefix))
    if version is None:
        # Time based start so an evicted version never revives stale keys
        cache.add(_version_key(prefix), int(time.time() * 1000), None)
        version = cache.get(_version_key(prefix))
    return version


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    # Convert args and kwargs to a stable string representation
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:v{get_prefix_version(prefix)}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="order_analytics")
        def orders_by_status():
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, func.__name__, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_prefix(prefix):
    """Invalidate every key cached under the prefix"""
    try:
        cache.incr(_version_key(prefix))
    except ValueError:
        # Version key missing or evicted
        cache.set(_version_key(prefix), int(time.time() * 1000), None)
    logger.debug(f"Invalidated cache prefix: {prefix}")
