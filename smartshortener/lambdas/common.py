"""Wiring shared by lambda handlers: configuration and data store selection"""

import logging

from smartshortener.types import LambdaConfiguration
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.redis import ShortURLRedisDAO
from smartshortener.dao.memory import ShortURLMemoryDAO
from smartshortener.utils import app_prefix
from smartshortener.utils.config import ShortenerConfig
from smartshortener.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)

# Process-wide store for the 'memory' backend (local runs only)
_memory_dao = ShortURLMemoryDAO()


def create_dao(app_config: LambdaConfiguration) -> ShortURLBaseDAO:
    """Instantiate the DAO for the backend present in the lambda's configuration

    Raises:
        BadConfigurationError: If no supported backend is configured, or the Redis section is malformed.
        DataStoreError: If the backend can't be reached.
    """
    if 'redis' in app_config:
        logger.debug('Using Redis as the backend database for short URLs.')
        return ShortURLRedisDAO.from_config(app_config['redis'], prefix=app_prefix())
    if 'memory' in app_config:
        logger.debug('Using in-process memory as the backend database for short URLs.')
        return _memory_dao
    raise BadConfigurationError(f'No supported backend configured (given sections: {sorted(app_config)}).')


def shortener_config(app_config: LambdaConfiguration) -> ShortenerConfig:
    return ShortenerConfig.from_mapping(app_config.get('shortener'))
