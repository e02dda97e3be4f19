"""Helper utilities for AWS lambda functions.

Functions:
    utcnow() -> datetime
        Current time as a timezone-aware UTC datetime
    base_url(event) -> str
        Public base URL of the API the event came through
    get_short_url(shortcode, event) -> str
        Public short URL for a shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into a JSON 500 response

Example:
    >>> from smartshortener.utils.helpers import get_short_url
    >>> event = {
    ...     "requestContext": {
    ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
    ...         "stage": "Prod"
    ...     }
    ... }
    >>> get_short_url('my-link', event)
    'https://abc123.execute-api.us-east-1.amazonaws.com/Prod/my-link'
    >>> get_short_url('my-link', {})
    'http://localhost:3000/my-link'
"""

import os
import json
import logging
import functools
from datetime import datetime, UTC
from typing import Any
from collections.abc import Callable

from smartshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from smartshortener.exceptions import MissingEnvironmentVariableError
from smartshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)

# Default API Gateway domains need the stage in the path; custom domains map it away
EXECUTE_API_DOMAIN = 'execute-api'
LOCAL_BASE_URL = 'http://localhost:3000'  # SAM CLI


def utcnow() -> datetime:
    return datetime.now(UTC)


def base_url(event: dict[str, Any]) -> str:
    """Public base URL of the API Gateway the event came through

    Returns:
        str: e.g. "https://sho.rt" for a custom domain,
             "https://abc123.execute-api.us-east-1.amazonaws.com/Prod" for the
             default one, or the SAM CLI address for local invocations.
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName')

    if not domain:
        return LOCAL_BASE_URL
    if EXECUTE_API_DOMAIN in domain:
        return f'https://{domain}/{request_context.get("stage", "")}'
    return f'https://{domain}'


def get_short_url(shortcode: str, event: dict[str, Any]) -> str:
    return f'{base_url(event).rstrip("/")}/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Decorator: fail fast when environment variables are missing or empty

    Raises:
        MissingEnvironmentVariableError:
            Naming every missing variable, e.g.
            "Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'"
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = ', '.join(f"'{name}'" for name in names if not os.environ.get(name))
            if missing:
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with HTTP 500 when a lambda handler raises unexpectedly.

    When running locally the exception is re-raised so SAM shows the traceback.
    """

    @functools.wraps(handler)
    def wrapper(event, context):
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled exception in lambda handler. Responding with 500.',
                extra={'requestId': getattr(context, 'aws_request_id', None), 'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json', 'Cache-Control': 'no-store'},
                'body': json.dumps({'message': 'Internal Server Error', 'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR}),
            }

    return wrapper
