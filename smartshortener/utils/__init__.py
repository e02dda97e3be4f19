from smartshortener.utils.config import app_env, app_name, project_root, app_prefix, load_config, ShortenerConfig
from smartshortener.utils.helpers import utcnow, base_url, get_short_url, require_environment, guarantee_500_response
from smartshortener.utils.shortener import generate_shortcode, generate_unique_shortcode
from smartshortener.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'generate_unique_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'ShortenerConfig',
    'utcnow',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
