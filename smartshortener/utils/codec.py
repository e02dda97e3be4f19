"""Base62 integer <-> string codec

Shortcodes are written over a fixed 62-symbol alphabet: digits first, then
lowercase, then uppercase letters. Encoding is plain place-value arithmetic,
most significant symbol first.

Functions:
    encode_base62(number) -> str
        Encode a non-negative integer.
    decode_base62(string) -> int
        Decode a base62 string back into an integer.

Example:
    >>> from smartshortener.utils.codec import encode_base62, decode_base62
    >>> encode_base62(123)
    '1Z'
    >>> decode_base62('1Z')
    123
"""

import string

from smartshortener.exceptions import InvalidSymbolError


ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)

_INDEX = {symbol: index for index, symbol in enumerate(ALPHABET)}


def encode_base62(number: int) -> str:
    """Encode a non-negative integer into a base62 string.

    Args:
        number (int):
            Value to encode. Zero maps to the first alphabet symbol.

    Returns:
        str: base62 representation, most significant symbol first.

    Raises:
        TypeError: If number is not an integer.
        ValueError: If number is negative.
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError(f'Number must be of type integer (given type: {type(number)}).')
    if number < 0:
        raise ValueError(f'Number must be a non-negative integer (given value: {number}).')
    if number == 0:
        return ALPHABET[0]

    symbols = []
    while number > 0:
        number, remainder = divmod(number, BASE)
        symbols.append(ALPHABET[remainder])
    return ''.join(reversed(symbols))


def decode_base62(encoded: str) -> int:
    """Decode a base62 string into an integer.

    Args:
        encoded (str):
            String made of alphabet symbols only.

    Returns:
        int: decoded value.

    Raises:
        InvalidSymbolError: If a character is outside the base62 alphabet.
    """
    value = 0
    for symbol in encoded:
        index = _INDEX.get(symbol)
        if index is None:
            raise InvalidSymbolError(f'Invalid base62 character: {symbol!r}')
        value = value * BASE + index
    return value
