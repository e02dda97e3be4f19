"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO.

Each record is a single JSON document stored under `<prefix>:links:<shortcode>`
(see serializers.py for the layout). Records with an expiration instant get a
Redis expiry of `expires_at + TTL.EXPIRED_GRACE_PERIOD`, so an expired link
keeps resolving to "gone" for a while before it disappears altogether.

Example:
    >>> from smartshortener.models import ShortURLModel
    >>> from smartshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")
    >>> dao.set(ShortURLModel(target="https://example.com/page", shortcode="abc123"))
    <ShortURLRedisDAO>
    >>> dao.get("abc123").target
    'https://example.com/page'
    >>> dao.increment_stats("abc123")
    1
"""

import logging
import dataclasses
from collections.abc import Callable

import redis
from beartype import beartype

from smartshortener.models import ShortURLModel
from smartshortener.constants import TTL
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.redis.mixins import RedisClientMixin
from smartshortener.dao.redis.helpers import handle_redis_connection_error
from smartshortener.dao.redis.serializers import dump_short_url, load_short_url
from smartshortener.dao.exceptions import ShortURLNotFoundError, DataStoreError
from smartshortener.utils.helpers import utcnow


logger = logging.getLogger(__name__)


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL records

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        set(short_url: ShortURLModel, **kwargs) -> ShortURLRedisDAO
        get(shortcode: str, **kwargs) -> ShortURLModel | None
        exists(shortcode: str, **kwargs) -> bool
        delete(shortcode: str, **kwargs) -> bool
        increment_stats(shortcode: str, **kwargs) -> int
        update(shortcode: str, mutate: Callable, **kwargs) -> ShortURLModel

    All methods raise DataStoreError on connectivity issues with Redis.
    """

    # WATCH/MULTI cycles before update() gives up on a contended key
    MAX_UPDATE_ATTEMPTS = 10

    @handle_redis_connection_error
    @beartype
    def set(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Store a short URL record, replacing any previous one

        Args:
            short_url (ShortURLModel):
                Record to store.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Example:
            >>> dao.set(ShortURLModel(target='https://example.com', shortcode='abc123'))
            <ShortURLRedisDAO>
        """
        link_key = self.keys.link_key(short_url.shortcode)
        payload = dump_short_url(short_url)

        exat = self._key_expiry(short_url)
        if exat is None:
            self.redis.set(link_key, payload)
        else:
            self.redis.set(link_key, payload, exat=exat)
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        """Retrieve a stored short URL record by shortcode

        Expired records still within their grace period are returned as-is.

        Returns:
            ShortURLModel | None:
                The stored record, or None if the shortcode is unknown.

        Raises:
            CorruptRecordError:
                If the stored document can't be decoded.
        """
        raw = self.redis.get(self.keys.link_key(shortcode))
        if raw is None:
            return None
        return load_short_url(raw)

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.delete(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def update(self, shortcode: str, mutate: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        """Read-modify-write a stored record inside a WATCH/MULTI transaction

        If another client writes the key between the read and the write, the
        transaction is aborted and the cycle starts over with the fresh record.

        Args:
            shortcode (str):
                The shortcode of the record to update.
            mutate (Callable[[ShortURLModel], ShortURLModel]):
                Pure function producing the new record. May be called more than once.

        Returns:
            ShortURLModel: The record as written.

        Raises:
            ShortURLNotFoundError:
                If the shortcode doesn't exist.
            DataStoreError:
                If the key kept changing for MAX_UPDATE_ATTEMPTS attempts.
        """
        link_key = self.keys.link_key(shortcode)

        with self.redis.pipeline() as pipe:
            for attempt in range(1, self.MAX_UPDATE_ATTEMPTS + 1):
                try:
                    pipe.watch(link_key)
                    raw = pipe.get(link_key)
                    if raw is None:
                        raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")

                    updated = mutate(load_short_url(raw))

                    exat = self._key_expiry(updated)
                    pipe.multi()
                    if exat is None:
                        pipe.set(link_key, dump_short_url(updated))
                    else:
                        pipe.set(link_key, dump_short_url(updated), exat=exat)
                    pipe.execute()
                    return updated
                except redis.exceptions.WatchError:
                    logger.debug('Concurrent write detected, retrying update.', extra={'shortcode': shortcode, 'attempt': attempt})

        raise DataStoreError(f"Short URL with code '{shortcode}' kept changing, gave up after {self.MAX_UPDATE_ATTEMPTS} attempts.")

    @beartype
    def increment_stats(self, shortcode: str, **kwargs) -> int:
        """Increment the visit counter of a stored record

        Returns:
            int: visit count after the increment.

        Raises:
            ShortURLNotFoundError:
                If the shortcode doesn't exist.

        Example:
            >>> dao.increment_stats('abc123')
            43
        """
        updated = self.update(shortcode, lambda short_url: dataclasses.replace(short_url, visit_count=short_url.visit_count + 1))
        return updated.visit_count

    @staticmethod
    def _key_expiry(short_url: ShortURLModel) -> int | None:
        """EXAT for a record, None when it must not expire in Redis

        A record whose grace period has already run out is stored without an
        expiry, so it stays readable and resolves to Gone instead of vanishing.
        """
        if short_url.expires_at is None:
            return None
        exat = int(short_url.expires_at.timestamp()) + TTL.EXPIRED_GRACE_PERIOD
        return exat if exat > int(utcnow().timestamp()) else None
