from smartshortener.routing.variants import select_variant
from smartshortener.routing.geo import match_geo_rule


__all__ = [
    'select_variant',
    'match_geo_rule',
]
