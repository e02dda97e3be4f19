"""Shared Redis client setup for Redis-backed DAOs

Classes:
    - RedisClientMixin: client construction (directly or from an AppConfig
      'redis' section), key schema and a PING healthcheck.

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO.from_config({'host': 'redis', 'port': 6379}, prefix='smartshortener:dev')
    >>> dao.ping()
    True
"""

from collections.abc import Mapping
from typing import Any

import redis

from smartshortener.dao.redis.redis_key_schema import RedisKeySchema
from smartshortener.dao.redis.helpers import UNREACHABLE_ERRORS, redis_location
from smartshortener.dao.exceptions import DataStoreError
from smartshortener.exceptions import BadConfigurationError


# Keys accepted in the 'redis' section of a lambda's AppConfig document
REDIS_CONFIG_KEYS = frozenset({'host', 'port', 'db', 'decode_responses', 'username', 'password', 'ssl'})


class RedisClientMixin:
    """Redis client setup and health check

    Attributes:
        redis (redis.Redis):
            Client used by subclasses for every command.
        keys (RedisKeySchema):
            Namespaced key names.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int = 6379,
        redis_db: int = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_ssl: bool = False,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        """Connect to Redis, or reuse `redis_client` when given

        The connection is checked with PING right away.

        Raises:
            DataStoreError:
                If Redis can't be reached.
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                ssl=redis_ssl,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self.ping()

    @classmethod
    def from_config(cls, config: Mapping[str, Any], prefix: str | None = None):
        """Build a DAO from the 'redis' section of a lambda's configuration

        Example:
            >>> ShortURLRedisDAO.from_config({'host': 'redis', 'port': 6379, 'ssl': True}, prefix='app:prod')

        Raises:
            BadConfigurationError:
                If the section contains unknown keys.
            DataStoreError:
                If Redis can't be reached.
        """
        unknown = set(config) - REDIS_CONFIG_KEYS
        if unknown:
            raise BadConfigurationError(f'Unknown Redis configuration keys: {sorted(unknown)}.')
        return cls(**{f'redis_{key}': value for key, value in config.items()}, prefix=prefix)

    def ping(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered, False if not and `raise_error` is False.

        Raises:
            DataStoreError:
                If Redis can't be reached and `raise_error` is True.
        """
        try:
            self.redis.ping()
        except UNREACHABLE_ERRORS as e:
            if not raise_error:
                return False
            location = redis_location(self.redis)
            raise DataStoreError(f"Can't connect to Redis at {location}. Check the provided configuration parameters.") from e
        return True
