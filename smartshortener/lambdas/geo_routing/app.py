import logging

from smartshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from smartshortener.exceptions import ValidationError, ConfigurationError, InfrastructureError
from smartshortener.dao.exceptions import ShortURLNotFoundError
from smartshortener.services.routing import configure_geo_rules, disable_geo_rules, geo_stats
from smartshortener.utils import load_config
from smartshortener.utils.helpers import guarantee_500_response
from smartshortener.lambdas.common import create_dao
from smartshortener.lambdas.responses import NO_CACHE, json_response, error_response, response_for, parse_json_body
from smartshortener.lambdas.geo_routing.constants import (
    MISSING_SHORTCODE,
    INVALID_JSON_BODY,
    INVALID_ROUTING_CONFIG,
    SHORT_URL_NOT_FOUND,
    METHOD_NOT_ALLOWED,
    CONFIG_LOAD_FAILED,
    GEO_RULES_CONFIGURED,
    GEO_RULES_DISABLED,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle /api/georoute/{shortcode}

    Methods:
        POST:   body {"enabled": bool, "routes": [{"url", "country"?, "region"?, "continent"?, "name"?}, ...]?,
                      "default_url": str?}
                configure (or reconfigure) geographic routing
        GET:    routing configuration, per-rule visits, visits by country and continent
        DELETE: disable geographic routing, keeping its configuration

    HTTP responses:
        200: success
        400: missing shortcode, invalid JSON, invalid routing rules
        404: short URL doesn't exist
        405: unsupported HTTP method
        500: server experienced an internal error
    """
    try:
        app_config = load_config('geo_routing')
    except (ConfigurationError, InfrastructureError) as e:
        logger.exception('Failed to load configuration for geo routing function. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
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

                # fmt: off
                rule_set = configure_geo_rules(dao, shortcode,
                                               enabled=bool(body.get('enabled')),
                                               raw_rules=body.get('routes'),
                                               default_destination=body.get('default_url'))
                # fmt: on
                logger.info('Geographic routing configured.', extra={'shortcode': shortcode, 'enabled': rule_set.enabled, 'event': GEO_RULES_CONFIGURED})
                return json_response(
                    200,
                    {
                        'shortcode': shortcode,
                        'geo_routing': geo_stats(dao, shortcode),
                        'message': 'Geographic routing configured successfully',
                    },
                )
            case 'DELETE':
                disable_geo_rules(dao, shortcode)
                logger.info('Geographic routing disabled.', extra={'shortcode': shortcode, 'event': GEO_RULES_DISABLED})
                return json_response(200, {'shortcode': shortcode, 'message': 'Geographic routing disabled'})
            case _:
                return json_response(200, {'shortcode': shortcode, 'geo_routing': geo_stats(dao, shortcode)}, headers={'Cache-Control': NO_CACHE})
    except ShortURLNotFoundError as e:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_for(404, e)
    except ValidationError as e:
        logger.info('Rejected geographic routing configuration. Responding with 400.', extra={'reason': str(e), 'event': INVALID_ROUTING_CONFIG})
        return response_for(400, e)
