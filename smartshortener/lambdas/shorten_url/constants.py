# Log event & error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_TARGET_URL = 'MISSING_TARGET_URL'
INVALID_REQUEST = 'INVALID_REQUEST'
CUSTOM_CODE_CONFLICT = 'CUSTOM_CODE_CONFLICT'
CODE_SPACE_EXHAUSTED = 'CODE_SPACE_EXHAUSTED'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
