import json
from typing import Any, cast

import pytest

from smartshortener.types import LambdaEvent, LambdaContext, LambdaConfiguration
from smartshortener.dao.memory import ShortURLMemoryDAO


def _make_event(
    method: str = 'GET',
    shortcode: str | None = 'abc123',
    body: Any = None,
    headers: dict[str, str] | None = None,
) -> LambdaEvent:
    """Build an API Gateway (Lambda Proxy) event."""
    return cast(LambdaEvent, {
        'resource': '/{shortcode}',
        'httpMethod': method,
        'path': f'/{shortcode}' if shortcode else '/',
        'pathParameters': {'shortcode': shortcode} if shortcode else None,
        'headers': headers or {'User-Agent': 'pytest'},
        'body': body if body is None or isinstance(body, str) else json.dumps(body),
        'requestContext': {'domainName': 'sho.rt', 'stage': 'test', 'httpMethod': method},
    })


@pytest.fixture
def make_event():
    return _make_event


@pytest.fixture(autouse=True)
def _deployed_env(monkeypatch):
    """Run handlers as deployed so unexpected errors turn into 500 responses."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'smartshortener'})


@pytest.fixture
def config() -> LambdaConfiguration:
    return cast(LambdaConfiguration, {'memory': {}, 'shortener': {'code_length': 7}})


@pytest.fixture
def dao() -> ShortURLMemoryDAO:
    return ShortURLMemoryDAO()
