# Log event & error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
SHORT_URL_EXPIRED = 'SHORT_URL_EXPIRED'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'

# Seconds the handler lingers for pending visit accounting before returning
ACCOUNTING_GRACE_SECONDS = 2.0
