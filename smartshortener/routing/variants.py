"""Weighted variant selection for A/B split redirects

Example:
    >>> import random
    >>> from smartshortener.models import Variant
    >>> variants = (Variant('https://a.example.com', 70), Variant('https://b.example.com', 30))
    >>> select_variant(variants, random.Random(7)).destination
    'https://a.example.com'
"""

import random
from collections.abc import Sequence

from smartshortener.models import Variant


def select_variant(variants: Sequence[Variant], rng: random.Random | None = None) -> Variant:
    """Pick a variant with probability proportional to its weight

    A uniform draw `r` in [0, total) is compared against the running sum of
    weights; the first variant whose cumulative weight reaches `r` wins. A
    zero-weight variant can only win a draw of exactly 0 from the head of the
    list. Weights are not required to add up to 100 here.

    Args:
        variants (Sequence[Variant]):
            Candidate variants, in configuration order.
        rng (random.Random | None):
            Source of randomness. Defaults to the module-level generator.

    Returns:
        Variant: the selected variant. The first one when all weights are zero.

    Raises:
        ValueError: If `variants` is empty.
    """
    if not variants:
        raise ValueError('Cannot select from an empty list of variants.')

    total = sum(variant.weight for variant in variants)
    if total <= 0:
        return variants[0]

    r = (rng or random).random() * total
    cumulative = 0.0
    for variant in variants:
        cumulative += variant.weight
        if cumulative >= r:
            return variant

    # Floating point rounding can leave the running sum short of r; fall back to the last weighted variant
    return next(variant for variant in reversed(variants) if variant.weight > 0)
