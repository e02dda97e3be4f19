from enum import StrEnum


class Dispatch(StrEnum):
    """How a redirect destination was chosen."""

    DIRECT = 'direct'
    VARIANT = 'variant'
    GEO = 'geo'


# Log event codes
ACCOUNTING_FAILED = 'ACCOUNTING_FAILED'
EXPIRED_DELETE_FAILED = 'EXPIRED_DELETE_FAILED'
SHORT_URL_CREATED = 'SHORT_URL_CREATED'
