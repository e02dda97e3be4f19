"""Configuration and statistics of redirect extensions

A short URL carries at most one extension: a weighted variant split or a set
of geographic rules. Configuring one kind replaces the other.

Functions:
    configure_variants(dao, shortcode, enabled, raw_variants=None) -> VariantSet
    disable_variants(dao, shortcode) -> ShortURLModel
    variant_stats(dao, shortcode) -> dict
    configure_geo_rules(dao, shortcode, enabled, raw_rules=None, default_destination=None) -> GeoRuleSet
    disable_geo_rules(dao, shortcode) -> ShortURLModel
    geo_stats(dao, shortcode) -> dict

All functions raise ShortURLNotFoundError for unknown shortcodes.
"""

import dataclasses
from typing import Any
from collections.abc import Sequence

from smartshortener.types import RawVariant, RawGeoRule
from smartshortener.models import ShortURLModel, VariantSet, GeoRuleSet, GeoMatchType
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import ShortURLNotFoundError
from smartshortener.constants import Limits
from smartshortener.exceptions import InvalidRoutingConfigError, InvalidURLError
from smartshortener.utils.validators import parse_variants, parse_geo_rules, validate_url


def _percentage(visits: int, total: int) -> str:
    return f'{visits / total * 100:.2f}' if total else '0.00'


def _get_or_raise(dao: ShortURLBaseDAO, shortcode: str) -> ShortURLModel:
    short_url = dao.get(shortcode)
    if short_url is None:
        raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")
    return short_url


def configure_variants(
    dao: ShortURLBaseDAO,
    shortcode: str,
    enabled: bool,
    raw_variants: Sequence[RawVariant] | None = None,
) -> VariantSet:
    """Enable, disable or replace the variant split of a short URL

    When `raw_variants` is omitted the currently configured variants are kept.
    Total visits survive reconfiguration; per-variant visits start over.

    Raises:
        InvalidRoutingConfigError:
            If the variants are malformed, or if enabling without any variants.
    """
    variants = parse_variants(raw_variants) if raw_variants is not None else None

    def mutate(short_url: ShortURLModel) -> ShortURLModel:
        current = short_url.extension if isinstance(short_url.extension, VariantSet) else None
        new_variants = variants if variants is not None else (current.variants if current else ())
        if enabled and not new_variants:
            raise InvalidRoutingConfigError(f'At least {Limits.MIN_VARIANTS} variants are required for A/B testing')

        extension = VariantSet(
            enabled=bool(enabled),
            variants=new_variants,
            total_visits=current.total_visits if current else 0,
        )
        return dataclasses.replace(short_url, extension=extension)

    return dao.update(shortcode, mutate).extension


def disable_variants(dao: ShortURLBaseDAO, shortcode: str) -> ShortURLModel:
    def mutate(short_url: ShortURLModel) -> ShortURLModel:
        if not isinstance(short_url.extension, VariantSet):
            return short_url
        return dataclasses.replace(short_url, extension=dataclasses.replace(short_url.extension, enabled=False))

    return dao.update(shortcode, mutate)


def variant_stats(dao: ShortURLBaseDAO, shortcode: str) -> dict[str, Any]:
    short_url = _get_or_raise(dao, shortcode)
    extension = short_url.extension if isinstance(short_url.extension, VariantSet) else VariantSet(enabled=False)

    return {
        'enabled': extension.enabled,
        'total_visits': extension.total_visits,
        'variants': [
            {
                'name': variant.label or 'Unnamed',
                'url': variant.destination,
                'weight': variant.weight,
                'visits': variant.visits,
                'percentage': _percentage(variant.visits, extension.total_visits),
            }
            for variant in extension.variants
        ],
    }


def configure_geo_rules(
    dao: ShortURLBaseDAO,
    shortcode: str,
    enabled: bool,
    raw_rules: Sequence[RawGeoRule] | None = None,
    default_destination: str | None = None,
) -> GeoRuleSet:
    """Enable, disable or replace the geographic rules of a short URL

    When `raw_rules` is omitted the currently configured rules are kept. The
    default destination falls back to the record's target.

    Raises:
        InvalidRoutingConfigError:
            If a rule or the default destination is malformed.
    """
    rules = parse_geo_rules(raw_rules) if raw_rules is not None else None
    if default_destination:
        try:
            default_destination = validate_url(default_destination)
        except InvalidURLError as e:
            raise InvalidRoutingConfigError(f'Invalid default URL: {e}') from e

    def mutate(short_url: ShortURLModel) -> ShortURLModel:
        current = short_url.extension if isinstance(short_url.extension, GeoRuleSet) else None
        extension = GeoRuleSet(
            enabled=bool(enabled),
            default_destination=default_destination or short_url.target,
            rules=rules if rules is not None else (current.rules if current else ()),
            total_visits=current.total_visits if current else 0,
            visits_by_country=dict(current.visits_by_country) if current else {},
            visits_by_continent=dict(current.visits_by_continent) if current else {},
        )
        return dataclasses.replace(short_url, extension=extension)

    return dao.update(shortcode, mutate).extension


def disable_geo_rules(dao: ShortURLBaseDAO, shortcode: str) -> ShortURLModel:
    def mutate(short_url: ShortURLModel) -> ShortURLModel:
        if not isinstance(short_url.extension, GeoRuleSet):
            return short_url
        return dataclasses.replace(short_url, extension=dataclasses.replace(short_url.extension, enabled=False))

    return dao.update(shortcode, mutate)


def geo_stats(dao: ShortURLBaseDAO, shortcode: str) -> dict[str, Any]:
    short_url = _get_or_raise(dao, shortcode)
    extension = short_url.extension
    if not isinstance(extension, GeoRuleSet):
        extension = GeoRuleSet(enabled=False, default_destination=short_url.target)

    rules = []
    for rule in extension.rules:
        entry = {'name': rule.label or 'Unnamed', 'country': None, 'continent': None, 'region': None}
        match rule.match_type:
            case GeoMatchType.REGION:
                entry['country'], entry['region'] = rule.match_value.split('-', 1)
            case GeoMatchType.COUNTRY:
                entry['country'] = rule.match_value
            case GeoMatchType.CONTINENT:
                entry['continent'] = rule.match_value
        entry |= {
            'url': rule.destination,
            'visits': rule.visits,
            'percentage': _percentage(rule.visits, extension.total_visits),
        }
        rules.append(entry)

    return {
        'enabled': extension.enabled,
        'total_visits': extension.total_visits,
        'default_url': extension.default_destination,
        'routes': rules,
        'visits_by_country': dict(extension.visits_by_country),
        'visits_by_continent': dict(extension.visits_by_continent),
    }
