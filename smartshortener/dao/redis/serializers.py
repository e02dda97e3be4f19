"""JSON document (de)serialization of ShortURLModel for Redis storage

Document layout:

    {
        "target": "https://example.com/page",
        "shortcode": "abc123",
        "created_at": "2025-12-26T12:00:00+00:00",
        "expires_at": null,
        "visit_count": 42,
        "is_custom": false,
        "extension": {
            "type": "variants",
            "enabled": true,
            "total_visits": 40,
            "variants": [
                {"destination": "https://a.example.com", "weight": 70, "label": "A", "visits": 28},
                {"destination": "https://b.example.com", "weight": 30, "label": "B", "visits": 12}
            ]
        }
    }

A geo routing extension is tagged with `"type": "geo_rules"` and carries
`default_destination`, `rules`, `visits_by_country` and `visits_by_continent`.
"""

import json
from datetime import datetime
from typing import Any

from smartshortener.types import ShortURLDocument
from smartshortener.models import ShortURLModel, Extension, Variant, VariantSet, GeoRule, GeoRuleSet, GeoMatchType
from smartshortener.dao.exceptions import CorruptRecordError


__all__ = ['dump_short_url', 'load_short_url', 'to_document', 'from_document']

VARIANTS = 'variants'
GEO_RULES = 'geo_rules'


def _dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None


def _extension_to_document(extension: Extension | None) -> dict[str, Any] | None:
    match extension:
        case None:
            return None
        case VariantSet():
            return {
                'type': VARIANTS,
                'enabled': extension.enabled,
                'total_visits': extension.total_visits,
                'variants': [
                    {'destination': v.destination, 'weight': v.weight, 'label': v.label, 'visits': v.visits}
                    for v in extension.variants
                ],
            }
        case GeoRuleSet():
            return {
                'type': GEO_RULES,
                'enabled': extension.enabled,
                'default_destination': extension.default_destination,
                'total_visits': extension.total_visits,
                'visits_by_country': dict(extension.visits_by_country),
                'visits_by_continent': dict(extension.visits_by_continent),
                'rules': [
                    {
                        'match_type': str(r.match_type),
                        'match_value': r.match_value,
                        'destination': r.destination,
                        'label': r.label,
                        'visits': r.visits,
                    }
                    for r in extension.rules
                ],
            }
    raise TypeError(f'Unsupported extension type: {type(extension)}')


def _extension_from_document(document: dict[str, Any] | None) -> Extension | None:
    if document is None:
        return None

    match document['type']:
        case 'variants':
            return VariantSet(
                enabled=bool(document['enabled']),
                total_visits=int(document.get('total_visits', 0)),
                variants=tuple(
                    Variant(
                        destination=v['destination'],
                        weight=float(v['weight']),
                        label=v.get('label'),
                        visits=int(v.get('visits', 0)),
                    )
                    for v in document.get('variants', [])
                ),
            )
        case 'geo_rules':
            return GeoRuleSet(
                enabled=bool(document['enabled']),
                default_destination=document['default_destination'],
                total_visits=int(document.get('total_visits', 0)),
                visits_by_country=dict(document.get('visits_by_country', {})),
                visits_by_continent=dict(document.get('visits_by_continent', {})),
                rules=tuple(
                    GeoRule(
                        match_type=GeoMatchType(r['match_type']),
                        match_value=r['match_value'],
                        destination=r['destination'],
                        label=r.get('label'),
                        visits=int(r.get('visits', 0)),
                    )
                    for r in document.get('rules', [])
                ),
            )
        case other:
            raise ValueError(f'Unknown extension type {other!r}')


def to_document(short_url: ShortURLModel) -> ShortURLDocument:
    return {
        'target': short_url.target,
        'shortcode': short_url.shortcode,
        'created_at': _dump_datetime(short_url.created_at),
        'expires_at': _dump_datetime(short_url.expires_at),
        'visit_count': short_url.visit_count,
        'is_custom': short_url.is_custom,
        'extension': _extension_to_document(short_url.extension),
    }


def from_document(document: ShortURLDocument) -> ShortURLModel:
    """Build a ShortURLModel from a stored document.

    Raises:
        CorruptRecordError: If a required field is missing or malformed.
    """
    try:
        return ShortURLModel(
            target=document['target'],
            shortcode=document['shortcode'],
            created_at=_load_datetime(document.get('created_at')),
            expires_at=_load_datetime(document.get('expires_at')),
            visit_count=int(document.get('visit_count', 0)),
            is_custom=bool(document.get('is_custom', False)),
            extension=_extension_from_document(document.get('extension')),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptRecordError(f'Stored short URL document is malformed: {e}') from e


def dump_short_url(short_url: ShortURLModel) -> str:
    return json.dumps(to_document(short_url), separators=(',', ':'))


def load_short_url(raw: str | bytes) -> ShortURLModel:
    try:
        document = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptRecordError('Stored short URL document is not valid JSON.') from e
    if not isinstance(document, dict):
        raise CorruptRecordError('Stored short URL document is not a JSON object.')
    return from_document(document)
