"""Validation of user supplied input

Functions:
    validate_url(url) -> str
        Check a destination URL and return its normalized form.
    validate_custom_code(code) -> str
        Check a user supplied shortcode.
    validate_expires_in(value) -> int | None
        Check a requested link lifetime in seconds.
    parse_variants(raw_variants) -> tuple[Variant, ...]
        Build weighted variants from a request body.
    parse_geo_rules(raw_rules) -> tuple[GeoRule, ...]
        Build geographic routing rules from a request body.

All validators raise a ValidationError subclass carrying a human readable message.
"""

import re
import ipaddress
import urllib.parse
from collections.abc import Sequence

from smartshortener.types import RawVariant, RawGeoRule
from smartshortener.models import Variant, GeoRule, GeoMatchType
from smartshortener.constants import Limits, RESERVED_CODES, CONTINENT_CODES
from smartshortener.exceptions import ValidationError, InvalidURLError, InvalidCustomCodeError, InvalidRoutingConfigError


CUSTOM_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
COUNTRY_PATTERN = re.compile(r'^[A-Z]{2}$')
REGION_PATTERN = re.compile(r'^[A-Z]{2}-[A-Z0-9]{1,3}$')

BLOCKED_HOSTS = frozenset({'localhost', '0.0.0.0', '::', '::1'})


def _is_private_or_local(hostname: str) -> bool:
    if hostname in BLOCKED_HOSTS or hostname.endswith('.localhost'):
        return True
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False  # not an IP literal
    return address.is_private or address.is_loopback or address.is_link_local or address.is_unspecified


def validate_url(url: str) -> str:
    """Validate a destination URL and return it normalized

    Rules:
        - non-empty, at most Limits.MAX_URL_LENGTH characters
        - absolute http or https URL with a host
        - no embedded credentials
        - host is not localhost, loopback, unspecified, private or link-local

    The scheme and host are lower-cased and an empty path becomes '/'.

    Raises:
        InvalidURLError: If any rule is violated.

    Example:
        >>> validate_url('HTTPS://Example.COM')
        'https://example.com/'
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError('URL cannot be empty')
    if len(url) > Limits.MAX_URL_LENGTH:
        raise InvalidURLError(f'URL exceeds maximum length of {Limits.MAX_URL_LENGTH} characters')

    try:
        components = urllib.parse.urlsplit(url.strip())
        hostname = components.hostname
        components.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidURLError('Invalid URL format') from e

    if components.scheme.lower() not in {'http', 'https'}:
        raise InvalidURLError('Only HTTP and HTTPS protocols are allowed')
    if not hostname:
        raise InvalidURLError('Invalid URL format')
    if components.username is not None or components.password is not None:
        raise InvalidURLError('URLs with embedded credentials are not allowed')
    if _is_private_or_local(hostname):
        raise InvalidURLError('URLs pointing to private or local addresses are not allowed')

    netloc = components.netloc.lower()
    path = components.path or '/'
    return urllib.parse.urlunsplit((components.scheme.lower(), netloc, path, components.query, components.fragment))


def validate_custom_code(code: str) -> str:
    """Validate a user supplied shortcode

    Custom codes are 3 to 20 characters of letters, digits, '-' and '_', and
    must not collide (case-insensitively) with a reserved path segment.

    Raises:
        InvalidCustomCodeError: If the code violates any rule.
    """
    if not isinstance(code, str):
        raise InvalidCustomCodeError('Custom code must be a string')
    if not Limits.CUSTOM_CODE_MIN_LENGTH <= len(code) <= Limits.CUSTOM_CODE_MAX_LENGTH:
        raise InvalidCustomCodeError(
            f'Custom code must be between {Limits.CUSTOM_CODE_MIN_LENGTH} and {Limits.CUSTOM_CODE_MAX_LENGTH} characters'
        )
    if not CUSTOM_CODE_PATTERN.match(code):
        raise InvalidCustomCodeError('Custom code can only contain letters, numbers, hyphens, and underscores')
    if code.lower() in RESERVED_CODES:
        raise InvalidCustomCodeError(f"Custom code '{code}' is reserved")
    return code


def validate_expires_in(value) -> int | None:
    """Validate a requested lifetime in seconds. None means "use the default"."""
    if value is None:
        return None
    # JSON decoders may hand over 3600.0 for 3600
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('expires_in must be an integer number of seconds')
    return value


def _validate_destination(url, position: int) -> str:
    if not url:
        raise InvalidRoutingConfigError(f'Entry #{position} must have a URL')
    try:
        return validate_url(url)
    except InvalidURLError as e:
        raise InvalidRoutingConfigError(f'Entry #{position} has an invalid URL: {e}') from e


def parse_variants(raw_variants: Sequence[RawVariant]) -> tuple[Variant, ...]:
    """Build weighted variants from request data

    Each raw variant is a mapping with `url`, `weight` and optional `name`.

    Raises:
        InvalidRoutingConfigError:
            If there are fewer than 2 or more than 10 variants, a variant has no
            valid URL, a weight is outside 0..100, or the weights don't add up to 100.
    """
    if not isinstance(raw_variants, Sequence) or isinstance(raw_variants, str) or len(raw_variants) < Limits.MIN_VARIANTS:
        raise InvalidRoutingConfigError(f'At least {Limits.MIN_VARIANTS} variants are required for A/B testing')
    if len(raw_variants) > Limits.MAX_VARIANTS:
        raise InvalidRoutingConfigError(f'Maximum {Limits.MAX_VARIANTS} variants allowed')

    variants = []
    for position, raw in enumerate(raw_variants, start=1):
        if not isinstance(raw, dict):
            raise InvalidRoutingConfigError(f'Variant #{position} must be an object')

        weight = raw.get('weight')
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not 0 <= weight <= Limits.MAX_VARIANT_WEIGHT:
            raise InvalidRoutingConfigError(f'Variant weight must be a number between 0 and {Limits.MAX_VARIANT_WEIGHT}')

        variants.append(
            Variant(
                destination=_validate_destination(raw.get('url'), position),
                weight=float(weight),
                label=raw.get('name'),
            )
        )

    total_weight = sum(v.weight for v in variants)
    if abs(total_weight - Limits.TOTAL_VARIANT_WEIGHT) > Limits.VARIANT_WEIGHT_TOLERANCE:
        raise InvalidRoutingConfigError(f'Total weight must equal {Limits.TOTAL_VARIANT_WEIGHT} (current: {total_weight:g})')

    return tuple(variants)


def parse_geo_rule(raw: RawGeoRule, position: int = 1) -> GeoRule:
    """Build one geographic rule from request data

    The rule kind is inferred from the keys present:

        {"country": "US", "region": "CA", "url": ...}  -> region rule 'US-CA'
        {"country": "US", "url": ...}                  -> country rule 'US'
        {"continent": "EU", "url": ...}                -> continent rule 'EU'
    """
    if not isinstance(raw, dict):
        raise InvalidRoutingConfigError(f'Rule #{position} must be an object')

    destination = _validate_destination(raw.get('url'), position)
    country = str(raw.get('country') or '').strip().upper()
    continent = str(raw.get('continent') or '').strip().upper()
    region = str(raw.get('region') or '').strip().upper()

    if country and not COUNTRY_PATTERN.match(country):
        raise InvalidRoutingConfigError(f'Invalid country code: {country}. Must be ISO 3166-1 alpha-2 (e.g., US, GB, JP)')
    if continent and continent not in CONTINENT_CODES:
        raise InvalidRoutingConfigError(f'Invalid continent code: {continent}. Must be one of: {", ".join(sorted(CONTINENT_CODES))}')

    if region:
        if not country:
            raise InvalidRoutingConfigError(f'Rule #{position}: a region requires a country')
        match_type, match_value = GeoMatchType.REGION, f'{country}-{region}'
        if not REGION_PATTERN.match(match_value):
            raise InvalidRoutingConfigError(f'Invalid region code: {region}')
    elif country:
        match_type, match_value = GeoMatchType.COUNTRY, country
    elif continent:
        match_type, match_value = GeoMatchType.CONTINENT, continent
    else:
        raise InvalidRoutingConfigError(f'Rule #{position} must specify a country, region or continent')

    return GeoRule(match_type=match_type, match_value=match_value, destination=destination, label=raw.get('name'))


def parse_geo_rules(raw_rules: Sequence[RawGeoRule]) -> tuple[GeoRule, ...]:
    """Build geographic routing rules from request data

    Raises:
        InvalidRoutingConfigError:
            If the rules are not a list, there are more than 50 of them, or any
            rule is malformed.
    """
    if not isinstance(raw_rules, Sequence) or isinstance(raw_rules, str):
        raise InvalidRoutingConfigError('Routes must be an array')
    if len(raw_rules) > Limits.MAX_GEO_RULES:
        raise InvalidRoutingConfigError(f'Maximum {Limits.MAX_GEO_RULES} geographic routes allowed')
    return tuple(parse_geo_rule(raw, position) for position, raw in enumerate(raw_rules, start=1))
