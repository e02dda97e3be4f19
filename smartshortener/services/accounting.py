"""Background visit accounting

Redirects must not wait for counters to be written, and a failed counter
update must never change where the client is sent. VisitRecorder runs each
update on a small thread pool and hands back the Future; nobody on the request
path waits for it.

Two accounting paths exist:

    direct   -> dao.increment_stats(shortcode)
    variant  -> dao.update(...) bumping visit_count, VariantSet.total_visits
                and the served variant's visits
    geo      -> dao.update(...) bumping visit_count, GeoRuleSet.total_visits,
                the matched rule's visits (if any) and the per-country and
                per-continent tallies

Failures are wrapped in AccountingError, logged and swallowed.
"""

import logging
import dataclasses
from concurrent.futures import Future, ThreadPoolExecutor
from collections.abc import Callable, Iterable

from smartshortener.models import ShortURLModel, Variant, VariantSet, GeoRule, GeoRuleSet, GeoInfo
from smartshortener.dao.base import ShortURLBaseDAO
from smartshortener.dao.exceptions import DAOError
from smartshortener.exceptions import AccountingError
from smartshortener.services.constants import Dispatch, ACCOUNTING_FAILED


logger = logging.getLogger(__name__)


def _bump_first[T](items: Iterable[T], matches: Callable[[T], bool]) -> tuple[T, ...]:
    bumped = False
    result = []
    for item in items:
        if not bumped and matches(item):
            item = dataclasses.replace(item, visits=item.visits + 1)
            bumped = True
        result.append(item)
    return tuple(result)


def _bump_key(counters: dict[str, int], key: str | None) -> dict[str, int]:
    counters = dict(counters)
    if key:
        counters[key] = counters.get(key, 0) + 1
    return counters


def count_variant_visit(short_url: ShortURLModel, variant: Variant | None) -> ShortURLModel:
    """Return a copy of the record with one more visit through `variant`."""
    short_url = dataclasses.replace(short_url, visit_count=short_url.visit_count + 1)
    extension = short_url.extension
    if not isinstance(extension, VariantSet):
        return short_url

    variants = extension.variants
    if variant is not None:
        variants = _bump_first(variants, lambda v: v.destination == variant.destination and v.label == variant.label)

    extension = dataclasses.replace(extension, variants=variants, total_visits=extension.total_visits + 1)
    return dataclasses.replace(short_url, extension=extension)


def count_geo_visit(short_url: ShortURLModel, rule: GeoRule | None, geo: GeoInfo | None) -> ShortURLModel:
    """Return a copy of the record with one more geo-routed visit."""
    short_url = dataclasses.replace(short_url, visit_count=short_url.visit_count + 1)
    extension = short_url.extension
    if not isinstance(extension, GeoRuleSet):
        return short_url

    rules = extension.rules
    if rule is not None:
        # fmt: off
        rules = _bump_first(rules, lambda r: r.match_type == rule.match_type
                                             and r.match_value == rule.match_value
                                             and r.destination == rule.destination)
        # fmt: on

    geo = geo or GeoInfo()
    extension = dataclasses.replace(
        extension,
        rules=rules,
        total_visits=extension.total_visits + 1,
        visits_by_country=_bump_key(extension.visits_by_country, geo.country),
        visits_by_continent=_bump_key(extension.visits_by_continent, geo.continent),
    )
    return dataclasses.replace(short_url, extension=extension)


class VisitRecorder:
    """Record visits off the request path

    Attributes:
        dao (ShortURLBaseDAO):
            Data store holding the visited records.

    Example:
        >>> with VisitRecorder(dao) as recorder:
        ...     future = recorder.record('abc123')
        >>> future.result()
        True
    """

    def __init__(self, dao: ShortURLBaseDAO, executor: ThreadPoolExecutor | None = None, max_workers: int = 2):
        self.dao = dao
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='visit-recorder')

    def __enter__(self) -> 'VisitRecorder':
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)

    def record(
        self,
        shortcode: str,
        dispatch: Dispatch = Dispatch.DIRECT,
        choice: Variant | GeoRule | None = None,
        geo: GeoInfo | None = None,
    ) -> Future:
        """Schedule accounting for one visit and return immediately

        Returns:
            Future: resolves to True once the visit is recorded, False if recording failed.
        """
        return self._executor.submit(self._run, shortcode, dispatch, choice, geo)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run(self, shortcode: str, dispatch: Dispatch, choice: Variant | GeoRule | None, geo: GeoInfo | None) -> bool:
        try:
            self.apply(shortcode, dispatch, choice, geo)
        except AccountingError:
            logger.warning(
                'Failed to record visit. Redirect outcome is unaffected.',
                exc_info=True,
                extra={'shortcode': shortcode, 'dispatch': str(dispatch), 'event': ACCOUNTING_FAILED},
            )
            return False
        return True

    def apply(
        self,
        shortcode: str,
        dispatch: Dispatch = Dispatch.DIRECT,
        choice: Variant | GeoRule | None = None,
        geo: GeoInfo | None = None,
    ) -> int:
        """Record one visit synchronously

        Returns:
            int: the record's visit count afterwards.

        Raises:
            AccountingError:
                If the data store rejects the update or the record vanished.
        """
        try:
            match dispatch:
                case Dispatch.VARIANT:
                    updated = self.dao.update(shortcode, lambda short_url: count_variant_visit(short_url, choice))
                    visit_count = updated.visit_count
                case Dispatch.GEO:
                    updated = self.dao.update(shortcode, lambda short_url: count_geo_visit(short_url, choice, geo))
                    visit_count = updated.visit_count
                case _:
                    visit_count = self.dao.increment_stats(shortcode)
        except DAOError as e:
            raise AccountingError(f"Failed to record visit for short URL '{shortcode}'.") from e

        logger.debug('Visit recorded.', extra={'shortcode': shortcode, 'dispatch': str(dispatch), 'visitCount': visit_count})
        return visit_count
