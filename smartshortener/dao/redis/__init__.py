from smartshortener.dao.redis.redis_key_schema import RedisKeySchema
from smartshortener.dao.redis.mixins import RedisClientMixin
from smartshortener.dao.redis.short_url_redis_dao import ShortURLRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
]
