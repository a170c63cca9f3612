"""Tests for selection pricing."""

from decimal import Decimal
from uuid import uuid4

import pytest

from studio_checkout.domain.pricing import PricingPolicy
from studio_checkout.services.pricing import price, quote, quote_count


def _ids(count: int) -> list:
    return [uuid4() for _ in range(count)]


def test_price_below_threshold_is_count_times_unit_price() -> None:
    policy = PricingPolicy(Decimal("25"), 10, Decimal("0.2"))

    assert price(_ids(3), policy) == Decimal("75.00")


def test_price_above_threshold_discounts_extra_photos() -> None:
    policy = PricingPolicy(Decimal("25"), 10, Decimal("0.2"))

    assert price(_ids(12), policy) == Decimal("290.00")


def test_price_at_threshold_has_no_discount() -> None:
    policy = PricingPolicy(Decimal("25"), 10, Decimal("0.2"))

    assert price(_ids(10), policy) == Decimal("250.00")


def test_quote_breakdown() -> None:
    policy = PricingPolicy(Decimal("25"), 10, Decimal("0.2"))

    breakdown = quote(_ids(12), policy)

    assert breakdown.full_price_count == 10
    assert breakdown.discounted_count == 2
    assert breakdown.subtotal == Decimal("300.00")
    assert breakdown.discount == Decimal("10.00")
    assert breakdown.total == Decimal("290.00")


@pytest.mark.parametrize(
    "policy",
    [
        PricingPolicy(Decimal("25"), 10, Decimal("0.2")),
        PricingPolicy(Decimal("19.99"), 0, Decimal("0.35")),
        PricingPolicy(Decimal("7.5"), 3, Decimal("1")),
        PricingPolicy(Decimal("0"), 5, Decimal("0")),
    ],
)
def test_price_is_non_decreasing_in_count(policy: PricingPolicy) -> None:
    totals = [quote_count(count, policy).total for count in range(40)]

    assert totals == sorted(totals)


def test_discount_matches_formula_within_one_cent() -> None:
    policy = PricingPolicy(Decimal("19.99"), 4, Decimal("0.15"))

    for extra in range(1, 15):
        expected = 4 * Decimal("19.99") + extra * Decimal("19.99") * Decimal("0.85")
        total = quote_count(4 + extra, policy).total
        assert abs(total - expected) <= Decimal("0.01")


def test_rounding_is_half_up_on_final_total() -> None:
    policy = PricingPolicy(Decimal("0.25"), 0, Decimal("0.5"))

    assert quote_count(1, policy).total == Decimal("0.13")


def test_rounding_is_applied_once_not_per_photo() -> None:
    policy = PricingPolicy(Decimal("0.10"), 0, Decimal("0.25"))

    assert quote_count(3, policy).total == Decimal("0.23")


def test_price_is_deterministic() -> None:
    policy = PricingPolicy(Decimal("12.34"), 2, Decimal("0.1"))
    selection = _ids(7)

    assert price(selection, policy) == price(selection, policy)


@pytest.mark.parametrize(
    ("unit_price", "threshold", "rate"),
    [
        (Decimal("-1"), 10, Decimal("0.2")),
        (Decimal("25"), -1, Decimal("0.2")),
        (Decimal("25"), 10, Decimal("1.5")),
        (Decimal("25"), 10, Decimal("-0.1")),
    ],
)
def test_policy_rejects_out_of_range_values(
    unit_price: Decimal, threshold: int, rate: Decimal
) -> None:
    with pytest.raises(ValueError):
        PricingPolicy(unit_price, threshold, rate)
