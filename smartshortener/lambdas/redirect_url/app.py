import logging
from concurrent.futures import wait

from smartshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from smartshortener.models import Variant
from smartshortener.exceptions import ShortURLExpiredError, ConfigurationError, InfrastructureError
from smartshortener.dao.exceptions import ShortURLNotFoundError
from smartshortener.services import Dispatch, RedirectResolver, Resolution, VisitRecorder
from smartshortener.utils import load_config, get_short_url
from smartshortener.utils.helpers import guarantee_500_response
from smartshortener.utils.runtime import get_geo_info
from smartshortener.lambdas.common import create_dao
from smartshortener.lambdas.responses import error_response, response_for, response_302
from smartshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    CONFIG_LOAD_FAILED,
    REDIRECT_SUCCESS,
    ACCOUNTING_GRACE_SECONDS,
)


logger = logging.getLogger(__name__)


def redirect_headers(resolution: Resolution) -> dict[str, str]:
    """Informational headers describing how the destination was chosen."""
    match resolution.dispatch:
        case Dispatch.VARIANT:
            label = resolution.choice.label if isinstance(resolution.choice, Variant) else None
            return {'X-Variant': label or 'unnamed'}
        case Dispatch.GEO:
            headers = {'X-Geo-Matched': 'true' if resolution.choice is not None else 'false'}
            if resolution.geo is not None and resolution.geo.country:
                headers['X-Geo-Country'] = resolution.geo.country
            return headers
        case _:
            return {}


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Resolve the shortcode (lookup, expiry, variant/geo dispatch)
    - Step 3: Redirect client to the destination
    - Step 4: Give pending visit accounting a short grace period before the
              runtime freezes the execution environment

    HTTP responses:
        302: Successful redirect
            headers:
                Location: destination URL
                X-Variant / X-Geo-Matched / X-Geo-Country: dispatch details
        400: Bad client request
            message: missing shortcode in path parameters
        404: Not found
            message: short URL doesn't exist
        410: Gone
            message: short URL has expired
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71TC'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
    except (ConfigurationError, InfrastructureError) as e:
        logger.exception('Failed to load configuration for redirect URL function. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_for(500, e)

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return error_response(400, message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    dao = create_dao(app_config)
    recorder = VisitRecorder(dao)
    try:
        # 2- Resolve the shortcode
        try:
            resolution = RedirectResolver(dao, recorder).resolve(shortcode, geo=get_geo_info(event))
        except ShortURLNotFoundError as e:
            logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
            return response_for(404, e)
        except ShortURLExpiredError as e:
            logger.info('Short URL has expired. Responding with 410.', extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED})
            return response_for(410, e)

        # 3- Redirect client to the destination
        logger.info(
            'Redirecting client to destination URL. Responding with 302.',
            extra={'shortcode': shortcode, 'dispatch': str(resolution.dispatch), 'event': REDIRECT_SUCCESS},
        )
        response = response_302(location=resolution.destination, headers=redirect_headers(resolution))

        # 4- Linger for accounting; its outcome never changes the response
        if resolution.accounting is not None:
            wait([resolution.accounting], timeout=ACCOUNTING_GRACE_SECONDS)
        return response
    finally:
        recorder.shutdown(wait=False)
