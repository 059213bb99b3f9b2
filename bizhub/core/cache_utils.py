"""
Caching utilities for expensive per-owner queries (analytics, dashboards)

Each owner has a cache "version" that is part of every key built for them.
Bumping the version invalidates all of the owner's cached results at once,
which works the same on Redis and on the local-memory backend.
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

OWNER_VERSION_PREFIX = "owner_cache_version"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _owner_version_key(owner_id):
    return f"{OWNER_VERSION_PREFIX}:{owner_id}"


def get_owner_cache_version(owner_id):
    version = cache.get(_owner_version_key(owner_id))
    if version is None:
        version = 1
        cache.set(_owner_version_key(owner_id), version, None)
    return version


def bump_owner_cache_version(owner_id):
    """Invalidate every cached result belonging to an owner"""
    if owner_id is None:
        return
    key = _owner_version_key(owner_id)
    try:
        cache.incr(key)
    except ValueError:
        # Key expired or was never set
        cache.set(key, 2, None)
    logger.debug(f"Bumped cache version for owner {owner_id}")


def cached_for_owner(key_prefix, cache_ttl=None):
    """
    Decorator to cache a query whose first argument is the owning user

    Usage:
        @cached_for_owner("inventory_analytics")
        def get_inventory_analytics(owner, today):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(owner, *args, **kwargs):
            version = get_owner_cache_version(owner.pk)
            cache_key = make_cache_key(key_prefix, owner.pk, version, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(owner, *args, **kwargs)
            ttl = cache_ttl if cache_ttl is not None else settings.BIZHUB_ANALYTICS_CACHE_TTL
            cache.set(cache_key, result, ttl)
            return result
        return wrapper
    return decorator
