class SmartShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:smartshortener_error'


class ValidationError(SmartShortenerError):
    """Base exception for rejected user input."""

    error_code = 'validation:validation_error'


class InvalidURLError(ValidationError):
    """Raised when a destination URL is malformed or not allowed."""

    error_code = 'validation:invalid_url_error'


class InvalidCustomCodeError(ValidationError):
    """Raised when a user supplied shortcode violates the shortcode rules."""

    error_code = 'validation:invalid_custom_code_error'


class InvalidRoutingConfigError(ValidationError):
    """Raised when a variant or geographic rule configuration is malformed."""

    error_code = 'validation:invalid_routing_config_error'


class InvalidSymbolError(ValidationError, ValueError):
    """Raised when decoding a string containing a symbol outside the base62 alphabet."""

    error_code = 'validation:invalid_symbol_error'


class ShortURLExpiredError(SmartShortenerError):
    """Raised when a short URL exists but its expiration instant has passed."""

    error_code = 'link:short_url_expired_error'


class CodeSpaceExhaustedError(SmartShortenerError):
    """Raised when every generated shortcode candidate collided with an existing one."""

    error_code = 'link:code_space_exhausted_error'


class AccountingError(SmartShortenerError):
    """Raised when a visit counter update fails. Never reaches the redirect outcome."""

    error_code = 'link:accounting_error'


class ConfigurationError(SmartShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(SmartShortenerError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'
