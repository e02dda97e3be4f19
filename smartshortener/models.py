from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class GeoMatchType(StrEnum):
    COUNTRY = 'country'
    CONTINENT = 'continent'
    REGION = 'region'


# fmt: off
@dataclass(frozen=True)
class Variant:
    destination: str                    # URL served when this variant is picked
    weight: float                       # Share of traffic, 0..100
    label: str | None = None            # Human readable variant name
    visits: int = 0                     # Times this variant was served


@dataclass(frozen=True)
class VariantSet:
    enabled: bool
    variants: tuple[Variant, ...] = ()
    total_visits: int = 0               # Visits served through the variant split


@dataclass(frozen=True)
class GeoRule:
    match_type: GeoMatchType
    match_value: str                    # 'US' (country), 'EU' (continent) or 'US-CA' (region)
    destination: str
    label: str | None = None
    visits: int = 0


@dataclass(frozen=True)
class GeoRuleSet:
    enabled: bool
    default_destination: str            # Served when no rule matches
    rules: tuple[GeoRule, ...] = ()
    total_visits: int = 0
    visits_by_country: dict[str, int] = field(default_factory=dict)
    visits_by_continent: dict[str, int] = field(default_factory=dict)


type Extension = VariantSet | GeoRuleSet


@dataclass(frozen=True)
class ShortURLModel:
    target: str                         # Original long URL
    shortcode: str                      # Unique short identifier of shortened URL
    created_at: datetime | None = None  # Creation instant (UTC)
    expires_at: datetime | None = None  # Instant after which this record is gone, None = never
    visit_count: int = 0                # Total redirects served
    is_custom: bool = False             # True if the shortcode was supplied by the user
    extension: Extension | None = None  # Variant split or geo routing, at most one

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now


@dataclass(frozen=True)
class GeoInfo:
    country: str | None = None          # ISO 3166-1 alpha-2, e.g. 'US'
    continent: str | None = None        # One of AF, AN, AS, EU, NA, OC, SA
    region: str | None = None           # Subdivision code within the country, e.g. 'CA'

    def __post_init__(self):
        for name in ('country', 'continent', 'region'):
            value = getattr(self, name)
            object.__setattr__(self, name, (value.strip().upper() or None) if value else None)
# fmt: on
