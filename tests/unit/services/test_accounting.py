"""Unit tests for visit accounting in accounting.py

Test coverage includes:

1. Pure counter updates
   - count_variant_visit() bumps the record, the split total and the served variant.
   - count_geo_visit() bumps the record, the rule set total, the matched rule
     and the per-country and per-continent tallies.

2. VisitRecorder
   - apply() picks the accounting path by dispatch kind.
   - Data store failures surface as AccountingError from apply() and as a
     False future result from record().
"""

import logging
from unittest.mock import MagicMock

import pytest

from smartshortener.models import ShortURLModel, Variant, VariantSet, GeoRule, GeoRuleSet, GeoMatchType, GeoInfo
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import DataStoreError
from smartshortener.exceptions import AccountingError
from smartshortener.services import VisitRecorder, Dispatch
from smartshortener.services.accounting import count_variant_visit, count_geo_visit


VARIANT_A = Variant('https://a.example.com/', 50.0, 'A')
VARIANT_B = Variant('https://b.example.com/', 50.0, 'B')
RULE_US = GeoRule(GeoMatchType.COUNTRY, 'US', 'https://us.example.com/')
RULE_EU = GeoRule(GeoMatchType.CONTINENT, 'EU', 'https://eu.example.com/')


@pytest.fixture
def variant_url():
    return ShortURLModel(
        target='https://example.com/',
        shortcode='abc123',
        visit_count=10,
        extension=VariantSet(enabled=True, variants=(VARIANT_A, VARIANT_B), total_visits=4),
    )


@pytest.fixture
def geo_url():
    return ShortURLModel(
        target='https://example.com/',
        shortcode='abc123',
        extension=GeoRuleSet(
            enabled=True,
            default_destination='https://example.com/',
            rules=(RULE_US, RULE_EU),
            visits_by_country={'US': 2},
        ),
    )


# -------------------------------
# 1. Pure counter updates
# -------------------------------


def test_count_variant_visit(variant_url):
    updated = count_variant_visit(variant_url, VARIANT_B)

    assert updated.visit_count == 11
    assert updated.extension.total_visits == 5
    assert [v.visits for v in updated.extension.variants] == [0, 1]
    assert variant_url.extension.total_visits == 4  # input untouched


def test_count_variant_visit_for_removed_variant(variant_url):
    """A variant which was reconfigured away still counts towards the totals."""
    updated = count_variant_visit(variant_url, Variant('https://gone.example.com/', 100.0))

    assert updated.extension.total_visits == 5
    assert [v.visits for v in updated.extension.variants] == [0, 0]


def test_count_variant_visit_without_split():
    short_url = ShortURLModel(target='https://example.com/', shortcode='abc123')
    assert count_variant_visit(short_url, VARIANT_A) == ShortURLModel(target='https://example.com/', shortcode='abc123', visit_count=1)


def test_count_geo_visit_matched(geo_url):
    updated = count_geo_visit(geo_url, RULE_US, GeoInfo(country='US', continent='NA'))

    assert updated.visit_count == 1
    assert updated.extension.total_visits == 1
    assert [r.visits for r in updated.extension.rules] == [1, 0]
    assert updated.extension.visits_by_country == {'US': 3}
    assert updated.extension.visits_by_continent == {'NA': 1}


def test_count_geo_visit_unmatched_without_location(geo_url):
    updated = count_geo_visit(geo_url, None, None)

    assert updated.extension.total_visits == 1
    assert [r.visits for r in updated.extension.rules] == [0, 0]
    assert updated.extension.visits_by_country == {'US': 2}
    assert updated.extension.visits_by_continent == {}


# -------------------------------
# 2. VisitRecorder
# -------------------------------


@pytest.mark.parametrize(
    'dispatch, choice, geo',
    [
        (Dispatch.DIRECT, None, None),
        (Dispatch.VARIANT, VARIANT_A, None),
        (Dispatch.GEO, RULE_EU, GeoInfo(country='FR', continent='EU')),
    ],
)
def test_apply_returns_visit_count(memory_dao, variant_url, geo_url, dispatch, choice, geo):
    memory_dao.set(geo_url if dispatch == Dispatch.GEO else variant_url)

    with VisitRecorder(memory_dao) as recorder:
        visit_count = recorder.apply('abc123', dispatch, choice, geo)

    assert visit_count == memory_dao.get('abc123').visit_count


def test_apply_wraps_data_store_errors():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.increment_stats.side_effect = DataStoreError('Redis is down')

    with VisitRecorder(dao) as recorder, pytest.raises(AccountingError, match="Failed to record visit for short URL 'abc123'."):
        recorder.apply('abc123')


def test_record_for_vanished_short_url(memory_dao, caplog):
    """A record deleted before accounting runs yields a logged failure."""
    with VisitRecorder(memory_dao) as recorder, caplog.at_level(logging.WARNING):
        assert recorder.record('abc123').result(timeout=5) is False

    assert any(getattr(r, 'event', None) == 'ACCOUNTING_FAILED' and r.shortcode == 'abc123' for r in caplog.records)


def test_record_uses_given_executor(memory_dao, variant_url):
    memory_dao.set(variant_url)
    executor = MagicMock()

    recorder = VisitRecorder(memory_dao, executor=executor)
    recorder.record('abc123', Dispatch.VARIANT, VARIANT_A)

    executor.submit.assert_called_once()
    assert memory_dao.get('abc123').visit_count == 10
