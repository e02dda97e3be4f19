# Log event & error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_ROUTING_CONFIG = 'INVALID_ROUTING_CONFIG'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
VARIANTS_CONFIGURED = 'VARIANTS_CONFIGURED'
VARIANTS_DISABLED = 'VARIANTS_DISABLED'
