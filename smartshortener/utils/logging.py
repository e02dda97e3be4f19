"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every record is written to stdout as one JSON line, e.g.:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "smartshortener.lambdas.redirect_url.app",
    "message": "Redirecting client to target URL. Responding with 302.",
    "app": "smartshortener",
    "env": "prod",
    "shortcode": "abc123",
    "event": "REDIRECT_SUCCESS"
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC
from typing import Any

from smartshortener.constants import ENV


# Chatty third-party loggers (AppConfig client, HTTP pools)
QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3')

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'taskName'}


class JsonFormatter(logging.Formatter):
    """Render records as JSON, keeping `extra` fields

    Args:
        static_fields (dict | None):
            Fields added to every record, e.g. the app name and environment.
    """

    def __init__(self, static_fields: dict[str, Any] | None = None):
        super().__init__()
        self.static_fields = {k: v for k, v in (static_fields or {}).items() if v is not None}

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec="milliseconds") \
                            .replace("+00:00", "Z")
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            **self.static_fields,
        }
        log.update((key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    static_fields = {
        'app': os.getenv(ENV.App.APP_NAME),
        'env': os.getenv(ENV.App.APP_ENV),
    }

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                    'static_fields': static_fields,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
