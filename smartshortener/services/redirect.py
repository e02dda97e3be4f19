"""Redirect resolution engine

RedirectResolver turns a shortcode into a destination URL:

    1. Lookup     dao.get(shortcode), absent -> ShortURLNotFoundError
    2. Liveness   expired -> best-effort dao.delete(), then ShortURLExpiredError
    3. Dispatch   enabled variants -> select_variant()
                  enabled geo rules -> match_geo_rule() or the default destination
                  otherwise -> the record's target
    4. Accounting handed to VisitRecorder, not awaited
    5. Resolution returned to the caller

Example:
    >>> from smartshortener.dao.memory import ShortURLMemoryDAO
    >>> dao = ShortURLMemoryDAO()
    >>> _ = dao.set(ShortURLModel(target='https://example.com/', shortcode='abc123'))
    >>> with RedirectResolver(dao) as resolver:
    ...     resolver.resolve('abc123').destination
    'https://example.com/'
"""

import random
import logging
from dataclasses import dataclass
from datetime import datetime
from concurrent.futures import Future
from collections.abc import Callable

from smartshortener.models import ShortURLModel, Variant, VariantSet, GeoRule, GeoRuleSet, GeoInfo
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import DAOError, ShortURLNotFoundError
from smartshortener.exceptions import ShortURLExpiredError
from smartshortener.routing import select_variant, match_geo_rule
from smartshortener.services.accounting import VisitRecorder
from smartshortener.services.constants import Dispatch, EXPIRED_DELETE_FAILED
from smartshortener.utils.helpers import utcnow


logger = logging.getLogger(__name__)


# fmt: off
@dataclass(frozen=True)
class Resolution:
    shortcode: str
    destination: str                        # URL the client is sent to
    dispatch: Dispatch = Dispatch.DIRECT    # How the destination was chosen
    choice: Variant | GeoRule | None = None # Served variant or matched geo rule
    geo: GeoInfo | None = None              # Requester location used for dispatch
    accounting: Future | None = None        # Pending visit accounting, never required to complete
# fmt: on


class RedirectResolver:
    """Resolve shortcodes to destinations and schedule visit accounting

    Attributes:
        dao (ShortURLBaseDAO):
            Data store holding short URL records.
        recorder (VisitRecorder):
            Background visit accounting. A given recorder stays owned by the
            caller. If none is given, a private recorder over `dao` is created
            and shut down by close() or on leaving a `with` block.
        clock (Callable[[], datetime]):
            Source of "now" for expiry checks.
        rng (random.Random | None):
            Source of randomness for variant selection.
    """

    def __init__(
        self,
        dao: ShortURLBaseDAO,
        recorder: VisitRecorder | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
    ):
        self.dao = dao
        self._owns_recorder = recorder is None
        self.recorder = recorder or VisitRecorder(dao)
        self.clock = clock
        self.rng = rng

    def __enter__(self) -> 'RedirectResolver':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Shut down the private recorder, if this resolver created one"""
        if self._owns_recorder:
            self.recorder.shutdown(wait=wait)

    def resolve(self, shortcode: str, geo: GeoInfo | None = None) -> Resolution:
        """Resolve a shortcode

        Args:
            shortcode (str):
                Shortcode taken from the request path.
            geo (GeoInfo | None):
                Requester location, used by geographic dispatch only.

        Returns:
            Resolution: destination and dispatch details.

        Raises:
            ShortURLNotFoundError:
                If no record exists for the shortcode.
            ShortURLExpiredError:
                If the record exists but has expired.
            DataStoreError:
                If the data store can't be reached during lookup.
        """
        short_url = self.dao.get(shortcode)
        if short_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' does not exist.")

        if short_url.is_expired(self.clock()):
            self._discard(shortcode)
            raise ShortURLExpiredError(f"Short URL with code '{shortcode}' has expired.")

        dispatch, choice, destination = self._dispatch(short_url, geo)
        accounting = self.recorder.record(shortcode, dispatch, choice, geo)

        return Resolution(
            shortcode=shortcode,
            destination=destination,
            dispatch=dispatch,
            choice=choice,
            geo=geo,
            accounting=accounting,
        )

    def _dispatch(self, short_url: ShortURLModel, geo: GeoInfo | None) -> tuple[Dispatch, Variant | GeoRule | None, str]:
        match short_url.extension:
            case VariantSet(enabled=True, variants=variants) if variants:
                variant = select_variant(variants, self.rng)
                return Dispatch.VARIANT, variant, variant.destination
            case GeoRuleSet(enabled=True, rules=rules, default_destination=default) if rules:
                rule = match_geo_rule(geo, rules)
                return Dispatch.GEO, rule, rule.destination if rule else default
            case _:
                return Dispatch.DIRECT, None, short_url.target

    def _discard(self, shortcode: str) -> None:
        try:
            self.dao.delete(shortcode)
        except DAOError:
            logger.warning(
                'Failed to delete expired short URL record.',
                exc_info=True,
                extra={'shortcode': shortcode, 'event': EXPIRED_DELETE_FAILED},
            )
