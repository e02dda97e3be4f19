"""Unit tests for JSON logging in logging.py

Test coverage includes:

1. JsonFormatter output
   - Standard fields, static fields, `extra` fields and exception text.

2. initialize_logging()
   - Root logger level follows LOG_LEVEL.
   - App name and environment are stamped on every record; AWS SDK loggers are quieted.
"""

import sys
import json
import logging

import pytest

from smartshortener.utils.logging import JsonFormatter, initialize_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord('smartshortener.test', logging.INFO, __file__, 10, 'Short URL created.', None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# -------------------------------
# 1. JsonFormatter output
# -------------------------------


def test_json_formatter_standard_fields():
    log = json.loads(JsonFormatter().format(_record()))

    assert log['level'] == 'INFO'
    assert log['logger'] == 'smartshortener.test'
    assert log['message'] == 'Short URL created.'
    assert log['timestamp'].endswith('Z')
    assert 'lineno' not in log


def test_json_formatter_includes_extra_fields():
    log = json.loads(JsonFormatter().format(_record(shortcode='abc123', event='SHORT_URL_CREATED')))

    assert log['shortcode'] == 'abc123'
    assert log['event'] == 'SHORT_URL_CREATED'


def test_json_formatter_static_fields():
    formatter = JsonFormatter(static_fields={'app': 'smartshortener', 'env': 'prod', 'region': None})
    log = json.loads(formatter.format(_record()))

    assert log['app'] == 'smartshortener'
    assert log['env'] == 'prod'
    assert 'region' not in log


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError('boom')
    except RuntimeError:
        record = logging.LogRecord('smartshortener.test', logging.ERROR, __file__, 10, 'failed', None, sys.exc_info())

    log = json.loads(JsonFormatter().format(record))
    assert 'RuntimeError: boom' in log['exception']


# -------------------------------
# 2. initialize_logging()
# -------------------------------


@pytest.mark.parametrize('level, expected', [('debug', logging.DEBUG), ('WARNING', logging.WARNING), (None, logging.INFO)])
def test_initialize_logging_level(monkeypatch, level, expected):
    if level is None:
        monkeypatch.delenv('LOG_LEVEL', raising=False)
    else:
        monkeypatch.setenv('LOG_LEVEL', level)

    root = logging.getLogger()
    saved_level, saved_handlers = root.level, root.handlers[:]
    try:
        initialize_logging()
        assert root.level == expected
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_initialize_logging_quiets_aws_sdk(monkeypatch):
    monkeypatch.setenv('APP_NAME', 'smartshortener')
    monkeypatch.setenv('APP_ENV', 'test')

    root = logging.getLogger()
    saved_level, saved_handlers = root.level, root.handlers[:]
    try:
        initialize_logging()
        assert logging.getLogger('botocore').level == logging.WARNING
        formatter = next(h.formatter for h in root.handlers if isinstance(h.formatter, JsonFormatter))
        assert formatter.static_fields == {'app': 'smartshortener', 'env': 'test'}
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
