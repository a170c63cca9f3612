"""Pricing domain models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PricingPolicy:
    """Per-photo price with a volume discount beyond a threshold."""

    unit_price: Decimal
    discount_threshold: int
    discount_rate: Decimal

    def __post_init__(self) -> None:
        if self.unit_price < 0:
            raise ValueError("unit_price must be non-negative")
        if self.discount_threshold < 0:
            raise ValueError("discount_threshold must be non-negative")
        if not Decimal(0) <= self.discount_rate <= Decimal(1):
            raise ValueError("discount_rate must be between 0 and 1")


@dataclass(frozen=True)
class PriceQuote:
    """Breakdown of a priced selection."""

    photo_count: int
    full_price_count: int
    discounted_count: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
