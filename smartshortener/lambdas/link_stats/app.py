import logging

from smartshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from smartshortener.exceptions import ConfigurationError, InfrastructureError
from smartshortener.dao.exceptions import ShortURLNotFoundError
from smartshortener.services.links import link_stats
from smartshortener.utils import load_config
from smartshortener.utils.helpers import guarantee_500_response
from smartshortener.lambdas.common import create_dao
from smartshortener.lambdas.responses import NO_CACHE, json_response, error_response, response_for
from smartshortener.lambdas.link_stats.constants import MISSING_SHORTCODE, SHORT_URL_NOT_FOUND, CONFIG_LOAD_FAILED, STATS_SUCCESS


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /api/stats/{shortcode}

    HTTP responses:
        200: shortcode, original_url, visit_count, created_at, expires_at, is_custom, is_expired
        400: missing shortcode in path parameters
        404: short URL doesn't exist
        500: server experienced an internal error
    """
    try:
        app_config = load_config('link_stats')
    except (ConfigurationError, InfrastructureError) as e:
        logger.exception('Failed to load configuration for link stats function. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_for(500, e)

    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return error_response(400, message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    try:
        stats = link_stats(create_dao(app_config), shortcode)
    except ShortURLNotFoundError as e:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_for(404, e)

    logger.debug('Responding with link statistics.', extra={'shortcode': shortcode, 'event': STATS_SUCCESS})
    return json_response(200, stats, headers={'Cache-Control': NO_CACHE})
