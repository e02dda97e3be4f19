"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to access
configuration data stored in **AWS AppConfig**. Each environment (`APP_ENV`) has
a dedicated AppConfig *Environment* within the shared AppConfig *Application*
identified by `APP_NAME`. Configuration data is stored as a JSON document under
a configuration profile (typically `backend-config`) and deployed to the
corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 42,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": { ... },
                "shortener": {"code_length": 6, "max_retries": 5, "default_ttl": 0}
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this AppConfig
document, determined by the current application environment.

Typical usage inside a Lambda handler:
    >>> from smartshortener.utils.config import load_config, ShortenerConfig
    >>> config = load_config('shorten_url')
    >>> print(config['redis']['host'])
    redis-15501.host.docker.internal
    >>> ShortenerConfig.from_mapping(config['shortener']).code_length
    6
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from collections.abc import Callable, Mapping

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from smartshortener.types import LambdaConfiguration
from smartshortener.constants import ENV, Defaults
from smartshortener.utils.helpers import require_environment
from smartshortener.utils.runtime import running_locally
from smartshortener.exceptions import AppConfigError, BadConfigurationError


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def project_root() -> Path:
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, os.path.dirname(__file__)))


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class ShortenerConfig:
    """Shortcode generation and link lifetime settings.

    Attributes:
        code_length (int):
            Length of generated shortcodes.
        max_retries (int):
            Number of candidates tried before giving up on a collision.
        default_ttl (int):
            Lifetime in seconds applied when a request doesn't ask for one.
            0 means links never expire.
    """

    code_length: int = Defaults.CODE_LENGTH
    max_retries: int = Defaults.MAX_RETRIES
    default_ttl: int = Defaults.DEFAULT_TTL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> 'ShortenerConfig':
        """Build settings from the `shortener` section of the AppConfig document.

        Raises:
            BadConfigurationError: If a value is not an integer in its allowed range.
        """
        data = data or {}
        values = {}
        for name, minimum in (('code_length', 1), ('max_retries', 1), ('default_ttl', 0)):
            if name not in data:
                continue
            try:
                value = int(data[name])
            except (TypeError, ValueError) as e:
                raise BadConfigurationError(f'Invalid shortener setting {name}={data[name]!r}') from e
            if value < minimum:
                raise BadConfigurationError(f'Shortener setting {name} must be >= {minimum} (given value: {value}).')
            values[name] = value
        return cls(**values)


def _sam_load_local_appconfig(func: Callable) -> Callable:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local
          AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     : Base URL of the local AppConfig Agent (e.g., http://appconfig-agent:2772).
        APPCONFIG_PROFILE_NAME  : Optional profile name (default: "backend-config").
    """

    def __validate_appconfig_url(url: str) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        data = _lambda_section(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


def _lambda_section(document: dict[str, Any], lambda_name: str) -> LambdaConfiguration:
    """Extract the active backend and shortener settings for one lambda."""
    try:
        backend = document['active_backend']
        lambda_config = document['configs'][lambda_name]
        backend_config = lambda_config[backend]
    except (KeyError, TypeError) as e:
        raise AppConfigError(f'AppConfig document has no {lambda_name!r} section for the active backend.') from e

    return {backend: backend_config, 'shortener': lambda_config.get('shortener', {})}


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       : AppConfig Application ID
        APPCONFIG_ENV_ID       : AppConfig Environment ID
        APPCONFIG_PROFILE_ID   : AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: {<active backend>: {...}, 'shortener': {...}}

    Raises:
        MissingEnvironmentVariableError:
            If one of the AppConfig identifiers is not set.
        AppConfigError:
            If AppConfig can't be reached, or the document is not valid JSON
            or lacks the lambda's section.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    try:
        # Start an AppConfig data session
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        # Fetch the configuration
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
    except (BotoCoreError, ClientError) as e:
        raise AppConfigError('Failed to fetch configuration from AWS AppConfig.') from e

    try:
        document = json.loads(content.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise AppConfigError('AppConfig returned a document which is not valid JSON.') from e

    data = _lambda_section(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data

