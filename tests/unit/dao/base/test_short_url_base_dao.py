"""Unit tests for the default read-modify-write in ShortURLBaseDAO.update()"""

import dataclasses
from unittest.mock import MagicMock

import pytest

from smartshortener.models import ShortURLModel
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import ShortURLNotFoundError


class DictDAO(ShortURLBaseDAO):
    """Minimal DAO relying on the inherited update()."""

    def __init__(self):
        self.records = {}

    def set(self, short_url, **kwargs):
        self.records[short_url.shortcode] = short_url
        return self

    def get(self, shortcode, **kwargs):
        return self.records.get(shortcode)

    def exists(self, shortcode, **kwargs):
        return shortcode in self.records

    def delete(self, shortcode, **kwargs):
        return self.records.pop(shortcode, None) is not None

    def increment_stats(self, shortcode, **kwargs):
        return self.update(shortcode, lambda s: dataclasses.replace(s, visit_count=s.visit_count + 1)).visit_count


def test_base_dao_is_abstract():
    with pytest.raises(TypeError):
        ShortURLBaseDAO()


def test_update_reads_mutates_and_writes():
    dao = DictDAO().set(ShortURLModel(target='https://example.com/', shortcode='abc123'))
    mutate = MagicMock(side_effect=lambda s: dataclasses.replace(s, visit_count=5))

    updated = dao.update('abc123', mutate)

    assert updated.visit_count == 5
    assert dao.get('abc123').visit_count == 5
    mutate.assert_called_once()


def test_update_missing_record():
    with pytest.raises(ShortURLNotFoundError):
        DictDAO().update('abc123', lambda s: s)


def test_increment_stats_through_update():
    dao = DictDAO().set(ShortURLModel(target='https://example.com/', shortcode='abc123'))
    assert dao.increment_stats('abc123') == 1
