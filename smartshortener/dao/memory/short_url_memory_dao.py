"""In-process implementation of ShortURLBaseDAO

Keeps records in a dictionary guarded by a lock. Intended for tests and local
development, where running Redis is not worth the trouble. Records never
expire on their own.

Example:
    >>> from smartshortener.dao.memory import ShortURLMemoryDAO
    >>> dao = ShortURLMemoryDAO()
    >>> dao.set(ShortURLModel(target='https://example.com', shortcode='abc123'))
    <ShortURLMemoryDAO>
    >>> dao.increment_stats('abc123')
    1
"""

import dataclasses
import threading
from collections.abc import Callable

from beartype import beartype

from smartshortener.models import ShortURLModel
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import ShortURLNotFoundError


class ShortURLMemoryDAO(ShortURLBaseDAO):
    def __init__(self, records: dict[str, ShortURLModel] | None = None):
        self._records: dict[str, ShortURLModel] = dict(records or {})
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    @beartype
    def set(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            self._records[short_url.shortcode] = short_url
        return self

    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        return self._records.get(shortcode)

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return shortcode in self._records

    @beartype
    def delete(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            return self._records.pop(shortcode, None) is not None

    @beartype
    def increment_stats(self, shortcode: str, **kwargs) -> int:
        updated = self.update(shortcode, lambda short_url: dataclasses.replace(short_url, visit_count=short_url.visit_count + 1))
        return updated.visit_count

    def update(self, shortcode: str, mutate: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        with self._lock:
            short_url = self._records.get(shortcode)
            if short_url is None:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")
            updated = mutate(short_url)
            self._records[updated.shortcode] = updated
            return updated

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
