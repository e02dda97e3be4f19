"""Short link creation and statistics

Functions:
    shorten_url(dao, url, custom_code=None, expires_in=None, config=None, *, clock, rng) -> ShortURLModel
        Validate input, pick a shortcode and store a new record.
    link_stats(dao, shortcode, *, clock) -> dict
        Summarize a stored record.
"""

import random
import logging
from datetime import datetime, timedelta
from typing import Any
from collections.abc import Callable

from smartshortener.models import ShortURLModel
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from smartshortener.services.constants import SHORT_URL_CREATED
from smartshortener.utils.config import ShortenerConfig
from smartshortener.utils.helpers import utcnow
from smartshortener.utils.shortener import generate_unique_shortcode
from smartshortener.utils.validators import validate_url, validate_custom_code, validate_expires_in


logger = logging.getLogger(__name__)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def shorten_url(
    dao: ShortURLBaseDAO,
    url: str,
    custom_code: str | None = None,
    expires_in: int | None = None,
    config: ShortenerConfig | None = None,
    *,
    clock: Callable[[], datetime] = utcnow,
    rng: random.Random | None = None,
) -> ShortURLModel:
    """Create and store a new short URL record

    Args:
        dao (ShortURLBaseDAO):
            Data store for the new record.
        url (str):
            Destination URL, stored in normalized form.
        custom_code (str | None):
            User supplied shortcode. Generated when omitted.
        expires_in (int | None):
            Lifetime in seconds counted from creation. Any value, including
            zero or a negative one, is applied as given. When omitted the
            configured `default_ttl` applies (0 = never expires).
        config (ShortenerConfig | None):
            Shortcode length, retry bound and default lifetime.

    Returns:
        ShortURLModel: the stored record.

    Raises:
        ValidationError:
            If the URL, custom code or lifetime is invalid.
        ShortURLAlreadyExistsError:
            If the custom code is taken.
        CodeSpaceExhaustedError:
            If no free shortcode was found within the retry bound.
        DataStoreError:
            If the data store can't be reached.
    """
    config = config or ShortenerConfig()
    target = validate_url(url)
    expires_in = validate_expires_in(expires_in)

    if custom_code is not None:
        shortcode = validate_custom_code(custom_code)
        if dao.exists(shortcode):
            raise ShortURLAlreadyExistsError(f"Custom code '{shortcode}' is already in use.")
    else:
        shortcode = generate_unique_shortcode(target, dao, config, clock=clock, rng=rng)

    created_at = clock()
    if expires_in is None and config.default_ttl > 0:
        expires_in = config.default_ttl
    expires_at = created_at + timedelta(seconds=expires_in) if expires_in is not None else None

    short_url = ShortURLModel(
        target=target,
        shortcode=shortcode,
        created_at=created_at,
        expires_at=expires_at,
        is_custom=custom_code is not None,
    )
    dao.set(short_url)

    logger.info(
        'Short URL created.',
        extra={'shortcode': shortcode, 'isCustom': short_url.is_custom, 'expiresAt': _isoformat(expires_at), 'event': SHORT_URL_CREATED},
    )
    return short_url


def link_stats(dao: ShortURLBaseDAO, shortcode: str, *, clock: Callable[[], datetime] = utcnow) -> dict[str, Any]:
    """Summarize a stored record, expired or not

    Raises:
        ShortURLNotFoundError: If no record exists for the shortcode.
    """
    short_url = dao.get(shortcode)
    if short_url is None:
        raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")

    return {
        'shortcode': short_url.shortcode,
        'original_url': short_url.target,
        'visit_count': short_url.visit_count,
        'created_at': _isoformat(short_url.created_at),
        'expires_at': _isoformat(short_url.expires_at),
        'is_custom': short_url.is_custom,
        'is_expired': short_url.is_expired(clock()),
    }
