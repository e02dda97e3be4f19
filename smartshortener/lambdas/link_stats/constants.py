# Log event & error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
STATS_SUCCESS = 'STATS_SUCCESS'
