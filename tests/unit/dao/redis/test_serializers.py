"""Unit tests for ShortURLModel JSON documents in serializers.py

Test coverage includes:

1. Document layout
   - Plain records, variant splits and geographic rule sets.

2. Loading documents
   - Ensures stored documents load back into equal models.
   - Ensures malformed documents raise CorruptRecordError.
"""

import json
from datetime import datetime, UTC

import pytest

from smartshortener.models import ShortURLModel, Variant, VariantSet, GeoRule, GeoRuleSet, GeoMatchType
from smartshortener.dao.exceptions import CorruptRecordError
from smartshortener.dao.redis.serializers import to_document, from_document, dump_short_url, load_short_url


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def geo_short_url():
    return ShortURLModel(
        target='https://example.com/',
        shortcode='geo1',
        created_at=datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC),
        expires_at=datetime(2025, 11, 15, 12, 0, 0, tzinfo=UTC),
        visit_count=7,
        is_custom=True,
        extension=GeoRuleSet(
            enabled=True,
            default_destination='https://example.com/',
            rules=(
                GeoRule(GeoMatchType.REGION, 'US-CA', 'https://ca.example.com/', 'California', 2),
                GeoRule(GeoMatchType.CONTINENT, 'EU', 'https://eu.example.com/'),
            ),
            total_visits=5,
            visits_by_country={'US': 3, 'DE': 2},
            visits_by_continent={'NA': 3, 'EU': 2},
        ),
    )


# -------------------------------
# 1. Document layout
# -------------------------------


def test_plain_document():
    document = to_document(ShortURLModel(target='https://example.com/', shortcode='abc123'))

    assert document == {
        'target': 'https://example.com/',
        'shortcode': 'abc123',
        'created_at': None,
        'expires_at': None,
        'visit_count': 0,
        'is_custom': False,
        'extension': None,
    }


def test_variants_document():
    extension = VariantSet(enabled=True, variants=(Variant('https://a.example.com/', 70.0, 'A', 4),), total_visits=4)
    document = to_document(ShortURLModel(target='https://example.com/', shortcode='abc123', extension=extension))

    assert document['extension'] == {
        'type': 'variants',
        'enabled': True,
        'total_visits': 4,
        'variants': [{'destination': 'https://a.example.com/', 'weight': 70.0, 'label': 'A', 'visits': 4}],
    }


def test_geo_rules_document(geo_short_url):
    document = to_document(geo_short_url)

    assert document['created_at'] == '2025-10-15T12:00:00+00:00'
    assert document['extension']['type'] == 'geo_rules'
    assert document['extension']['rules'][0] == {
        'match_type': 'region',
        'match_value': 'US-CA',
        'destination': 'https://ca.example.com/',
        'label': 'California',
        'visits': 2,
    }
    assert document['extension']['visits_by_country'] == {'US': 3, 'DE': 2}


# -------------------------------
# 2. Loading documents
# -------------------------------


def test_load_dumped_document(geo_short_url):
    assert load_short_url(dump_short_url(geo_short_url)) == geo_short_url


def test_load_document_with_defaults():
    short_url = from_document({'target': 'https://example.com/', 'shortcode': 'abc123'})

    assert short_url.visit_count == 0
    assert short_url.is_custom is False
    assert short_url.extension is None


@pytest.mark.parametrize(
    'raw',
    [
        '{not json',
        '["a", "list"]',
        '{"shortcode": "abc123"}',
        '{"target": "https://example.com/", "shortcode": "abc123", "created_at": "yesterday"}',
        '{"target": "https://example.com/", "shortcode": "abc123", "extension": {"type": "unknown", "enabled": true}}',
        '{"target": "https://example.com/", "shortcode": "abc123", "visit_count": "many"}',
    ],
)
def test_load_malformed_document(raw):
    with pytest.raises(CorruptRecordError):
        load_short_url(raw)


def test_dump_is_compact(geo_short_url):
    raw = dump_short_url(geo_short_url)
    assert ', ' not in raw
    assert json.loads(raw)['shortcode'] == 'geo1'
