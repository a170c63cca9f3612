"""Selection pricing."""

from collections.abc import Collection
from decimal import ROUND_HALF_UP, Decimal

from studio_checkout.domain.pricing import PriceQuote, PricingPolicy

_CENT = Decimal("0.01")


def quote_count(photo_count: int, policy: PricingPolicy) -> PriceQuote:
    """Price a number of photos and return the full breakdown.

    Photos up to ``discount_threshold`` cost ``unit_price``; every photo past
    the threshold is discounted by ``discount_rate``. Rounding happens once,
    on the final total.
    """
    if photo_count < 0:
        raise ValueError("photo_count must be non-negative")
    full_price_count = min(photo_count, policy.discount_threshold)
    discounted_count = photo_count - full_price_count
    raw_total = full_price_count * policy.unit_price + (
        discounted_count * policy.unit_price * (Decimal(1) - policy.discount_rate)
    )
    subtotal = (photo_count * policy.unit_price).quantize(_CENT, ROUND_HALF_UP)
    total = raw_total.quantize(_CENT, ROUND_HALF_UP)
    return PriceQuote(
        photo_count=photo_count,
        full_price_count=full_price_count,
        discounted_count=discounted_count,
        subtotal=subtotal,
        discount=subtotal - total,
        total=total,
    )


def quote(selected_photo_ids: Collection[object], policy: PricingPolicy) -> PriceQuote:
    """Return the price breakdown for a selection."""
    return quote_count(len(selected_photo_ids), policy)


def price(selected_photo_ids: Collection[object], policy: PricingPolicy) -> Decimal:
    """Return the total amount for a selection."""
    return quote(selected_photo_ids, policy).total
