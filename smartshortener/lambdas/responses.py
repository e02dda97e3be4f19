"""API Gateway (Lambda Proxy) response builders shared by all lambda handlers"""

import json
from typing import Any

from smartshortener.types import LambdaResponse
from smartshortener.exceptions import SmartShortenerError


JSON_HEADERS = {'Content-Type': 'application/json'}
NO_CACHE = 'no-cache, no-store, must-revalidate'

REASONS = {
    400: 'Bad Request',
    404: 'Not Found',
    405: 'Method Not Allowed',
    409: 'Conflict',
    410: 'Gone',
    500: 'Internal Server Error',
}


def json_response(status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': JSON_HEADERS | (headers or {}),
        'body': json.dumps(body),
    }


def error_response(status_code: int, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = REASONS.get(status_code, 'Error')
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(status_code, body)


def response_for(status_code: int, error: SmartShortenerError) -> LambdaResponse:
    """Error response carrying the exception's message and error code."""
    return error_response(status_code, message=str(error) or None, error_code=error.error_code)


def response_302(*, location: str, headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location, 'Cache-Control': NO_CACHE} | (headers or {}),
        'body': '',
    }


def parse_json_body(event: dict[str, Any]) -> dict[str, Any] | None:
    """Decode the request body. Returns None if it's not a JSON object."""
    try:
        body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None
