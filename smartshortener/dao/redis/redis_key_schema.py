"""Key layout of short URL data in Redis

    [<prefix>:]links:<shortcode>    JSON document of one ShortURLModel

The prefix is '<app name>:<app env>' in deployed environments, so several
stages can share one Redis database.
"""

__all__ = ['RedisKeySchema']


class RedisKeySchema:
    SEPARATOR = ':'
    LINKS = 'links'

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    def _key(self, *parts: str) -> str:
        if self.prefix is not None:
            parts = (self.prefix, *parts)
        return self.SEPARATOR.join(parts)

    def link_key(self, shortcode: str) -> str:
        return self._key(self.LINKS, shortcode)
