from smartshortener.exceptions import SmartShortenerError


class DAOError(SmartShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a ShortURLModel is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'


class ShortURLAlreadyExistsError(DAOError):
    """Raised when a shortcode requested by the user is already taken."""

    error_code = 'dao:short_url_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'


class CorruptRecordError(DAOError):
    """Raised when a stored document cannot be decoded into a ShortURLModel."""

    error_code = 'dao:corrupt_record_error'
