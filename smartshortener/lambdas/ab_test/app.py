import logging

from smartshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from smartshortener.exceptions import ValidationError, ConfigurationError, InfrastructureError
from smartshortener.dao.exceptions import ShortURLNotFoundError
from smartshortener.services.routing import configure_variants, disable_variants, variant_stats
from smartshortener.utils import load_config
from smartshortener.utils.helpers import guarantee_500_response
from smartshortener.lambdas.common import create_dao
from smartshortener.lambdas.responses import NO_CACHE, json_response, error_response, response_for, parse_json_body
from smartshortener.lambdas.ab_test.constants import (
    MISSING_SHORTCODE,
    INVALID_JSON_BODY,
    INVALID_ROUTING_CONFIG,
    SHORT_URL_NOT_FOUND,
    METHOD_NOT_ALLOWED,
    CONFIG_LOAD_FAILED,
    VARIANTS_CONFIGURED,
    VARIANTS_DISABLED,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle /api/abtest/{shortcode}

    Methods:
        POST:   body {"enabled": bool, "variants": [{"url", "weight", "name"?}, ...]?}
                configure (or reconfigure) the weighted variant split
        GET:    variant split configuration and per-variant visit statistics
        DELETE: disable the variant split, keeping its configuration

    HTTP responses:
        200: success
        400: missing shortcode, invalid JSON, invalid variant configuration
        404: short URL doesn't exist
        405: unsupported HTTP method
        500: server experienced an internal error
    """
    try:
        app_config = load_config('ab_test')
    except (ConfigurationError, InfrastructureError) as e:
        logger.exception('Failed to load configuration for A/B test function. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_for(500, e)

    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return error_response(400, message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    method = (event.get('httpMethod') or 'GET').upper()
    if method not in {'GET', 'POST', 'DELETE'}:
        logger.info('Unsupported HTTP method. Responding with 405.', extra={'method': method, 'event': METHOD_NOT_ALLOWED})
        return error_response(405, message=f'{method} is not supported', error_code=METHOD_NOT_ALLOWED)

    dao = create_dao(app_config)
    try:
        match method:
            case 'POST':
                body = parse_json_body(event)
                if body is None:
                    logger.info('Request body is not a JSON object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
                    return error_response(400, message='invalid JSON body', error_code=INVALID_JSON_BODY)

                variant_set = configure_variants(dao, shortcode, bool(body.get('enabled')), body.get('variants'))
                logger.info('A/B test configured.', extra={'shortcode': shortcode, 'enabled': variant_set.enabled, 'event': VARIANTS_CONFIGURED})
                return json_response(
                    200,
                    {
                        'shortcode': shortcode,
                        'ab_test': variant_stats(dao, shortcode),
                        'message': 'A/B test configured successfully',
                    },
                )
            case 'DELETE':
                disable_variants(dao, shortcode)
                logger.info('A/B test disabled.', extra={'shortcode': shortcode, 'event': VARIANTS_DISABLED})
                return json_response(200, {'shortcode': shortcode, 'message': 'A/B testing disabled'})
            case _:
                return json_response(200, {'shortcode': shortcode, 'ab_test': variant_stats(dao, shortcode)}, headers={'Cache-Control': NO_CACHE})
    except ShortURLNotFoundError as e:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_for(404, e)
    except ValidationError as e:
        logger.info('Rejected A/B test configuration. Responding with 400.', extra={'reason': str(e), 'event': INVALID_ROUTING_CONFIG})
        return response_for(400, e)
