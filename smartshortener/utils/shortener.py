"""Shortcode generation utility

This module derives short, base62-safe codes from a destination URL and
resolves collisions against the data store.

Functions:
    fnv1a_32(data) -> int
        32-bit FNV-1a hash of a byte string.
    generate_shortcode(url, attempt=0, length=6, *, clock=utcnow, rng=None) -> str
        Generate a candidate shortcode for a URL.
    generate_unique_shortcode(url, dao, config=None, *, clock=utcnow, rng=None) -> str
        Generate a shortcode that does not exist in the data store yet.

Example:
    >>> from smartshortener.utils.shortener import generate_shortcode
    >>> code = generate_shortcode('https://example.com', attempt=0, length=6)
    >>> len(code)
    6
"""

import random
import logging
from datetime import datetime
from collections.abc import Callable

from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.exceptions import CodeSpaceExhaustedError
from smartshortener.utils.codec import ALPHABET, encode_base62
from smartshortener.utils.config import ShortenerConfig
from smartshortener.utils.helpers import utcnow


logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2_166_136_261
FNV_PRIME = 16_777_619
MASK_32 = 0xFFFFFFFF


def fnv1a_32(data: bytes) -> int:
    """Hash bytes with 32-bit FNV-1a (XOR each byte, then multiply by the FNV prime)."""
    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & MASK_32
    return value


def generate_shortcode(
    url: str,
    attempt: int = 0,
    length: int = 6,
    *,
    clock: Callable[[], datetime] = utcnow,
    rng: random.Random | None = None,
) -> str:
    """Generate a candidate shortcode for a destination URL.

    The URL, the generation timestamp (milliseconds) and the attempt counter
    are joined into a seed, hashed with FNV-1a and base62-encoded. The result
    is padded with random alphabet symbols or truncated to `length`.

    Args:
        url (str):
            Destination URL.
        attempt (int):
            Collision counter, 0 for the first attempt.
        length (int):
            Desired shortcode length.
        clock (Callable[[], datetime]):
            Source of the generation timestamp.
        rng (random.Random | None):
            Source of padding symbols. Defaults to the module-level generator.

    Returns:
        str: candidate shortcode of exactly `length` characters.

    NOTE:
        The output is not unique by itself. Uniqueness is established by
        probing the data store in generate_unique_shortcode().
    """
    if attempt < 0:
        raise ValueError(f'Attempt must be a non-negative integer (given value: {attempt}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    timestamp = int(clock().timestamp() * 1000)
    seed = f'{url}:{timestamp}:{attempt}'
    code = encode_base62(fnv1a_32(seed.encode('utf-8')))

    if len(code) < length:
        rng = rng or random
        code += ''.join(rng.choice(ALPHABET) for _ in range(length - len(code)))
    return code[:length]


def generate_unique_shortcode(
    url: str,
    dao: ShortURLBaseDAO,
    config: ShortenerConfig | None = None,
    *,
    clock: Callable[[], datetime] = utcnow,
    rng: random.Random | None = None,
) -> str:
    """Generate a shortcode which doesn't exist in the data store yet

    Candidates are produced with an increasing attempt counter and checked with
    `dao.exists()`. The first non-colliding candidate wins.

    Args:
        url (str):
            Destination URL.
        dao (ShortURLBaseDAO):
            Data store used for collision probing.
        config (ShortenerConfig | None):
            Code length and retry bound. Defaults to ShortenerConfig().

    Returns:
        str: shortcode for which `dao.exists()` returned False.

    Raises:
        CodeSpaceExhaustedError:
            If every attempt collided.
        DataStoreError:
            If the data store can't be reached.

    NOTE: Concurrent requests racing for the same candidate are not
          coordinated. A record written between the existence check and the
          caller's `dao.set()` is overwritten (last writer wins).
    """
    config = config or ShortenerConfig()

    for attempt in range(config.max_retries):
        shortcode = generate_shortcode(url, attempt, config.code_length, clock=clock, rng=rng)
        if not dao.exists(shortcode):
            return shortcode

        logger.warning(
            'Shortcode collision detected, retrying.',
            extra={'shortcode': shortcode, 'attempt': attempt + 1, 'maxRetries': config.max_retries},
        )

    raise CodeSpaceExhaustedError(f'Failed to generate a unique shortcode after {config.max_retries} attempts.')
