"""Rule-based geographic dispatch

Rules are matched with a fixed precedence: region rules first, then country
rules, then continent rules. Within one level the first rule in configuration
order wins.
"""

from collections.abc import Sequence

from smartshortener.models import GeoInfo, GeoRule, GeoMatchType


def _first(rules: Sequence[GeoRule], match_type: GeoMatchType, value: str | None) -> GeoRule | None:
    if value is None:
        return None
    return next((rule for rule in rules if rule.match_type == match_type and rule.match_value == value), None)


def _qualified_region(geo: GeoInfo) -> str | None:
    """Region as 'CC-RRR', or None unless both country and region are known and agree"""
    if not (geo.country and geo.region):
        return None
    if '-' not in geo.region:
        return f'{geo.country}-{geo.region}'
    return geo.region if geo.region.split('-', 1)[0] == geo.country else None


def match_geo_rule(geo: GeoInfo | None, rules: Sequence[GeoRule]) -> GeoRule | None:
    """Find the most specific rule matching the requester's location

    Args:
        geo (GeoInfo | None):
            Requester's location. Any attribute may be missing.
        rules (Sequence[GeoRule]):
            Configured rules.

    Returns:
        GeoRule | None: the matching rule, or None if nothing matches
        (the caller falls back to the default destination).

    Example:
        >>> rules = [GeoRule(GeoMatchType.CONTINENT, 'NA', 'https://na.example.com'),
        ...          GeoRule(GeoMatchType.COUNTRY, 'US', 'https://us.example.com')]
        >>> match_geo_rule(GeoInfo(country='US', continent='NA'), rules).destination
        'https://us.example.com'
    """
    if geo is None or not rules:
        return None

    # fmt: off
    return _first(rules, GeoMatchType.REGION, _qualified_region(geo)) \
        or _first(rules, GeoMatchType.COUNTRY, geo.country) \
        or _first(rules, GeoMatchType.CONTINENT, geo.continent)
    # fmt: on
