"""Unit tests for the RedirectResolver in redirect.py

Test coverage includes:

1. Lookup and liveness
   - Unknown shortcodes raise ShortURLNotFoundError.
   - Expired records are deleted and raise ShortURLExpiredError.
   - Links created with a negative lifetime resolve to Gone.
   - A failed delete of an expired record is logged, the outcome stays Gone.

2. Dispatch
   - Plain records redirect to their target.
   - Enabled variant splits pick a weighted variant.
   - Enabled geographic rules pick the matching rule or the default destination.
   - Disabled extensions fall back to the target.

3. Accounting
   - Visits are recorded in the background.
   - Accounting failures never change the redirect outcome.
   - close() shuts down only a recorder the resolver created itself.
"""

import logging
import random
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from smartshortener.models import ShortURLModel, Variant, VariantSet, GeoRule, GeoRuleSet, GeoMatchType, GeoInfo
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import ShortURLNotFoundError, DataStoreError
from smartshortener.exceptions import ShortURLExpiredError
from smartshortener.services import RedirectResolver, VisitRecorder, Dispatch
from smartshortener.services.links import shorten_url


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def recorder(memory_dao):
    with VisitRecorder(memory_dao) as _recorder:
        yield _recorder


@pytest.fixture
def resolver(memory_dao, recorder, clock, rng):
    return RedirectResolver(memory_dao, recorder, clock=clock, rng=rng)


@pytest.fixture
def short_url(now):
    return ShortURLModel(target='https://example.com/', shortcode='abc123', created_at=now)


@pytest.fixture
def variants():
    return (Variant('https://a.example.com/', 70.0, 'A'), Variant('https://b.example.com/', 30.0, 'B'))


@pytest.fixture
def geo_rules():
    return (
        GeoRule(GeoMatchType.COUNTRY, 'US', 'https://us.example.com/', 'US'),
        GeoRule(GeoMatchType.CONTINENT, 'EU', 'https://eu.example.com/', 'Europe'),
    )


def _fixed_rng(value: float) -> MagicMock:
    rng = MagicMock(spec=random.Random)
    rng.random.return_value = value
    return rng


# -------------------------------
# 1. Lookup and liveness
# -------------------------------


def test_resolve_unknown_shortcode(resolver):
    with pytest.raises(ShortURLNotFoundError, match="Short URL with code 'missing' does not exist."):
        resolver.resolve('missing')


def test_resolve_expired_short_url(resolver, memory_dao, short_url, now):
    """Ensure expired records resolve to Gone and are removed."""
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', expires_at=now - timedelta(seconds=1)))

    with pytest.raises(ShortURLExpiredError, match="Short URL with code 'abc123' has expired."):
        resolver.resolve('abc123')

    assert not memory_dao.exists('abc123')


def test_resolve_short_url_expiring_now(resolver, memory_dao, short_url, now):
    """A record is still live at its exact expiration instant."""
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', expires_at=now))
    assert resolver.resolve('abc123').destination == 'https://example.com/'


def test_resolve_link_created_already_expired(resolver, memory_dao, clock, rng):
    """A link shortened with a negative lifetime is Gone, not missing."""
    short_url = shorten_url(memory_dao, 'https://example.com/a', expires_in=-1, clock=clock, rng=rng)

    with pytest.raises(ShortURLExpiredError):
        resolver.resolve(short_url.shortcode)


def test_resolve_expired_short_url_delete_failure(short_url, now, clock, caplog):
    """Ensure a failed delete is logged and the outcome is still Gone."""
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.return_value = ShortURLModel(target=short_url.target, shortcode='abc123', expires_at=now - timedelta(days=1))
    dao.delete.side_effect = DataStoreError('Redis is down')
    resolver = RedirectResolver(dao, MagicMock(spec=VisitRecorder), clock=clock)

    with caplog.at_level(logging.WARNING), pytest.raises(ShortURLExpiredError):
        resolver.resolve('abc123')

    dao.delete.assert_called_once_with('abc123')
    assert any(getattr(r, 'event', None) == 'EXPIRED_DELETE_FAILED' for r in caplog.records)
    resolver.recorder.record.assert_not_called()


# -------------------------------
# 2. Dispatch
# -------------------------------


def test_resolve_direct(resolver, memory_dao, short_url):
    memory_dao.set(short_url)

    resolution = resolver.resolve('abc123')

    assert resolution.destination == 'https://example.com/'
    assert resolution.dispatch == Dispatch.DIRECT
    assert resolution.choice is None


@pytest.mark.parametrize('draw, expected', [(0.1, 'https://a.example.com/'), (0.9, 'https://b.example.com/')])
def test_resolve_variant(memory_dao, recorder, clock, short_url, variants, draw, expected):
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', extension=VariantSet(enabled=True, variants=variants)))
    resolver = RedirectResolver(memory_dao, recorder, clock=clock, rng=_fixed_rng(draw))

    resolution = resolver.resolve('abc123')

    assert resolution.dispatch == Dispatch.VARIANT
    assert resolution.destination == expected
    assert resolution.choice.destination == expected


@pytest.mark.parametrize(
    'geo, expected, matched',
    [
        (GeoInfo(country='US', continent='NA'), 'https://us.example.com/', True),
        (GeoInfo(country='FR', continent='EU'), 'https://eu.example.com/', True),
        (GeoInfo(country='JP', continent='AS'), 'https://default.example.com/', False),
        (None, 'https://default.example.com/', False),
    ],
)
def test_resolve_geo(resolver, memory_dao, short_url, geo_rules, geo, expected, matched):
    extension = GeoRuleSet(enabled=True, default_destination='https://default.example.com/', rules=geo_rules)
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', extension=extension))

    resolution = resolver.resolve('abc123', geo=geo)

    assert resolution.dispatch == Dispatch.GEO
    assert resolution.destination == expected
    assert (resolution.choice is not None) is matched
    assert resolution.geo == geo


@pytest.mark.parametrize(
    'extension',
    [
        VariantSet(enabled=False, variants=(Variant('https://a.example.com/', 100.0),)),
        VariantSet(enabled=True, variants=()),
        GeoRuleSet(enabled=False, default_destination='https://default.example.com/', rules=(GeoRule(GeoMatchType.COUNTRY, 'US', 'https://us.example.com/'),)),
        GeoRuleSet(enabled=True, default_destination='https://default.example.com/'),
    ],
)
def test_resolve_inactive_extension_falls_back_to_target(resolver, memory_dao, short_url, extension):
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', extension=extension))

    resolution = resolver.resolve('abc123', geo=GeoInfo(country='US'))

    assert resolution.dispatch == Dispatch.DIRECT
    assert resolution.destination == 'https://example.com/'


# -------------------------------
# 3. Accounting
# -------------------------------


def test_resolve_records_direct_visit(resolver, memory_dao, short_url):
    memory_dao.set(short_url)

    resolution = resolver.resolve('abc123')

    assert resolution.accounting.result(timeout=5) is True
    assert memory_dao.get('abc123').visit_count == 1


def test_resolve_records_variant_visit(memory_dao, recorder, clock, short_url, variants):
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', extension=VariantSet(enabled=True, variants=variants)))
    resolver = RedirectResolver(memory_dao, recorder, clock=clock, rng=_fixed_rng(0.9))

    resolver.resolve('abc123').accounting.result(timeout=5)

    stored = memory_dao.get('abc123')
    assert stored.visit_count == 1
    assert stored.extension.total_visits == 1
    assert [v.visits for v in stored.extension.variants] == [0, 1]


def test_resolve_records_geo_visit(resolver, memory_dao, short_url, geo_rules):
    extension = GeoRuleSet(enabled=True, default_destination='https://default.example.com/', rules=geo_rules)
    memory_dao.set(ShortURLModel(target=short_url.target, shortcode='abc123', extension=extension))

    resolver.resolve('abc123', geo=GeoInfo(country='DE', continent='EU')).accounting.result(timeout=5)
    resolver.resolve('abc123', geo=GeoInfo(country='JP', continent='AS')).accounting.result(timeout=5)

    stored = memory_dao.get('abc123').extension
    assert stored.total_visits == 2
    assert [r.visits for r in stored.rules] == [0, 1]
    assert stored.visits_by_country == {'DE': 1, 'JP': 1}
    assert stored.visits_by_continent == {'EU': 1, 'AS': 1}


def test_accounting_failure_does_not_change_outcome(short_url, clock, caplog):
    """Ensure a failing counter update is logged and swallowed."""
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.get.return_value = short_url
    dao.increment_stats.side_effect = DataStoreError('Redis is down')

    with VisitRecorder(dao) as recorder, caplog.at_level(logging.WARNING):
        resolution = RedirectResolver(dao, recorder, clock=clock).resolve('abc123')
        assert resolution.accounting.result(timeout=5) is False

    assert resolution.destination == 'https://example.com/'
    assert any(getattr(r, 'event', None) == 'ACCOUNTING_FAILED' for r in caplog.records)


def test_resolve_creates_private_recorder(memory_dao, short_url, clock):
    memory_dao.set(short_url)
    with RedirectResolver(memory_dao, clock=clock) as resolver:
        assert resolver.resolve('abc123').accounting.result(timeout=5) is True

    # the private pool is gone once the resolver is closed
    with pytest.raises(RuntimeError):
        resolver.recorder.record('abc123')


def test_close_leaves_given_recorder_running(memory_dao, recorder, short_url, clock):
    memory_dao.set(short_url)
    RedirectResolver(memory_dao, recorder, clock=clock).close()

    assert recorder.record('abc123').result(timeout=5) is True
