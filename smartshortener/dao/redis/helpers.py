import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from smartshortener.dao.exceptions import DataStoreError


__all__ = ['redis_location', 'handle_redis_connection_error']

F = TypeVar('F', bound=Callable[..., Any])

# Failures that mean "the store is unreachable", as opposed to a bad command
UNREACHABLE_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def redis_location(client: redis.Redis) -> str:
    """Describe where a client points to, as 'host:port/db'"""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error(method: F) -> F:
    """Turn an unreachable Redis into DataStoreError for a DAO method

    Any other Redis error (e.g. WRONGTYPE) propagates unchanged.

    Example:
        >>> @handle_redis_connection_error
        ... def exists(self, shortcode):
        ...     return bool(self.redis.exists(shortcode))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except UNREACHABLE_ERRORS as e:
            location = redis_location(self.redis)
            raise DataStoreError(f"Can't connect to Redis at {location}. Operation '{method.__name__}' aborted.") from e

    return wrapper
