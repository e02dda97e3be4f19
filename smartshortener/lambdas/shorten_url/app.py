import logging

from smartshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from smartshortener.exceptions import ValidationError, CodeSpaceExhaustedError, ConfigurationError, InfrastructureError
from smartshortener.dao.exceptions import ShortURLAlreadyExistsError
from smartshortener.services.links import shorten_url
from smartshortener.utils import load_config, get_short_url
from smartshortener.utils.helpers import guarantee_500_response
from smartshortener.lambdas.common import create_dao, shortener_config
from smartshortener.lambdas.responses import json_response, error_response, response_for, parse_json_body
from smartshortener.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_TARGET_URL,
    INVALID_REQUEST,
    CUSTOM_CODE_CONFLICT,
    CODE_SPACE_EXHAUSTED,
    CONFIG_LOAD_FAILED,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load configuration and connect to the data store
    - Step 2: Extract url, custom_code and expires_in from request body
    - Step 3: Validate input, pick a shortcode and store the record
    - Step 4: Respond with 201 and the new short URL

    HTTP responses:
        201: Short URL created
            shortcode, short_url, original_url, created_at, expires_at
        400: Bad client request
            message: invalid JSON, missing url, invalid url / custom code / expires_in
        409: Conflict
            message: custom code already in use
        500: Internal server error
            message: configuration problem or no free shortcode found

    Example:
        >>> event = {'body': '{"url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
    """
    # 1- Load configuration and connect to the data store
    try:
        app_config = load_config('shorten_url')
        config = shortener_config(app_config)
    except (ConfigurationError, InfrastructureError) as e:
        logger.exception('Failed to load configuration for shorten URL function. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_for(500, e)
    dao = create_dao(app_config)

    # 2- Extract request fields
    body = parse_json_body(event)
    if body is None:
        logger.info('Request body is not a JSON object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return error_response(400, message='invalid JSON body', error_code=INVALID_JSON_BODY)

    url = body.get('url')
    if not url:
        logger.info("Missing 'url' in request body. Responding with 400.", extra={'event': MISSING_TARGET_URL})
        return error_response(400, message="missing 'url' in JSON body", error_code=MISSING_TARGET_URL)

    # 3- Create the short URL record
    try:
        short_url = shorten_url(
            dao,
            url,
            custom_code=body.get('custom_code') or None,
            expires_in=body.get('expires_in'),
            config=config,
        )
    except ValidationError as e:
        logger.info('Rejected shorten request. Responding with 400.', extra={'reason': str(e), 'event': INVALID_REQUEST})
        return response_for(400, e)
    except ShortURLAlreadyExistsError as e:
        logger.info('Custom code already in use. Responding with 409.', extra={'event': CUSTOM_CODE_CONFLICT})
        return response_for(409, e)
    except CodeSpaceExhaustedError as e:
        logger.error('No free shortcode found. Responding with 500.', extra={'event': CODE_SPACE_EXHAUSTED})
        return response_for(500, e)

    # 4- Respond with the new short URL
    logger.info(
        'Short URL created. Responding with 201.',
        extra={'shortcode': short_url.shortcode, 'event': SHORTEN_SUCCESS},
    )
    return json_response(
        201,
        {
            'shortcode': short_url.shortcode,
            'short_url': get_short_url(short_url.shortcode, event),
            'original_url': short_url.target,
            'created_at': short_url.created_at.isoformat(),
            'expires_at': short_url.expires_at.isoformat() if short_url.expires_at else None,
        },
    )
