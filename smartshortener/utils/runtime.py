import os

from smartshortener.types import LambdaEvent
from smartshortener.models import GeoInfo
from smartshortener.constants import ENV, GeoHeaders


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def get_geo_info(event: LambdaEvent) -> GeoInfo:
    """Extract viewer geolocation from request headers.

    Explicit `X-Geo-*` headers (set by an edge function) take precedence over
    the CloudFront viewer headers. CloudFront reports no continent.
    """
    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    return GeoInfo(
        country=headers.get(GeoHeaders.COUNTRY) or headers.get(GeoHeaders.CLOUDFRONT_COUNTRY),
        continent=headers.get(GeoHeaders.CONTINENT),
        region=headers.get(GeoHeaders.REGION) or headers.get(GeoHeaders.CLOUDFRONT_REGION),
    )
