from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Grace period during which an expired link is kept so it resolves to Gone (30 days in seconds)
    EXPIRED_GRACE_PERIOD = 2_592_000  # 60 * 60 * 24 * 30


class Defaults:
    """Default shortener settings."""

    CODE_LENGTH = 6  # Length of generated shortcodes
    MAX_RETRIES = 5  # Collision retries before giving up
    DEFAULT_TTL = 0  # Default link lifetime in seconds (0 = never expires)


class Limits:
    """Validation limits for user supplied input."""

    MAX_URL_LENGTH = 2048
    CUSTOM_CODE_MIN_LENGTH = 3
    CUSTOM_CODE_MAX_LENGTH = 20
    MIN_VARIANTS = 2
    MAX_VARIANTS = 10
    MAX_VARIANT_WEIGHT = 100
    TOTAL_VARIANT_WEIGHT = 100
    VARIANT_WEIGHT_TOLERANCE = 0.01
    MAX_GEO_RULES = 50


# Path segments used by other endpoints; never valid as custom shortcodes
RESERVED_CODES = frozenset({'api', 'health', 'admin', 'stats', 'shorten', 'new', 'create'})

# Continent codes as reported by edge geolocation
CONTINENT_CODES = frozenset({'AF', 'AN', 'AS', 'EU', 'NA', 'OC', 'SA'})


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


class GeoHeaders:
    """Request headers carrying viewer geolocation (lower-cased)."""

    COUNTRY = 'x-geo-country'
    CONTINENT = 'x-geo-continent'
    REGION = 'x-geo-region'
    CLOUDFRONT_COUNTRY = 'cloudfront-viewer-country'
    CLOUDFRONT_REGION = 'cloudfront-viewer-country-region'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
