"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-process memory).

Responsibilities:
    - Provide an interface for storing, retrieving and deleting ShortURLModel objects.
    - Provide a cheap existence check used by shortcode collision detection.
    - Provide visit counter updates for redirect accounting.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from smartshortener.models import ShortURLModel
        >>> from smartshortener.dao.memory import ShortURLMemoryDAO

        >>> dao = ShortURLMemoryDAO()

        >>> short_url = ShortURLModel(
        ...     target="https://example.com/blog/article-123",
        ...     shortcode="a1b2c3",
        ... )
        >>> dao.set(short_url)

        >>> retrieved = dao.get("a1b2c3")
        >>> print(retrieved.target)
        https://example.com/blog/article-123

        >>> dao.exists("a1b2c3")
        True
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from smartshortener.models import ShortURLModel
from smartshortener.dao.exceptions import ShortURLNotFoundError


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        set(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Store a ShortURLModel under its shortcode, replacing any previous record.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> ShortURLModel | None:
            Retrieve a ShortURLModel by shortcode. Returns None if not found.
            Expired records are returned as-is; judging expiry is up to the caller.
            Raises DataStoreError on connection or read failure.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether a record is stored under the shortcode.

        delete(shortcode: str, **kwargs) -> bool:
            Remove a record. Returns True if something was removed.

        increment_stats(shortcode: str, **kwargs) -> int:
            Increment the visit counter of a record and return the new count.
            Raises ShortURLNotFoundError if the record does not exist.

        update(shortcode: str, mutate: Callable, **kwargs) -> ShortURLModel:
            Replace a record with `mutate(record)` and return the new record.
            Raises ShortURLNotFoundError if the record does not exist.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO or
        ShortURLMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        Implementations must be safe to call from a worker thread, since
        visit accounting runs outside the request path.
    """

    @abstractmethod
    def set(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Store a ShortURLModel in the data store.

        An existing record with the same shortcode is overwritten. Callers that
        need insert-only semantics must check `exists()` first.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be stored.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel | None:
        """Retrieve a ShortURLModel from the data store by its shortcode.

        Args:
            shortcode (str):
                The shortcode of the ShortURLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel | None: The ShortURLModel instance if found, otherwise None.

        Raises:
            CorruptRecordError:
                If the stored record can't be decoded.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a record is stored under the shortcode.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> bool:
        """Delete the record stored under the shortcode.

        Returns:
            bool: True if a record was removed, False if there was nothing to remove.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def increment_stats(self, shortcode: str, **kwargs) -> int:
        """Increment the visit counter of a stored record.

        Args:
            shortcode (str):
                The shortcode of the visited record.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            int: The visit count after the increment.

        Raises:
            ShortURLNotFoundError:
                If no record is stored under the shortcode.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    def update(self, shortcode: str, mutate: Callable[[ShortURLModel], ShortURLModel], **kwargs) -> ShortURLModel:
        """Read a record, transform it and write the result back.

        The default implementation is a plain get/set sequence. Implementations
        that can isolate the read-modify-write cycle should override it.

        Args:
            shortcode (str):
                The shortcode of the record to update.

            mutate (Callable[[ShortURLModel], ShortURLModel]):
                Pure function producing the new record from the stored one.

        Returns:
            ShortURLModel: The record as written.

        Raises:
            ShortURLNotFoundError:
                If no record is stored under the shortcode.

            DataStoreError:
                If there is an error in the data store.
        """
        short_url = self.get(shortcode, **kwargs)
        if short_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")
        updated = mutate(short_url)
        self.set(updated, **kwargs)
        return updated
