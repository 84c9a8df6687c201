"""
Pricing component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class QuoteInput:
    """Input for pricing one line item."""

    base_price: Decimal
    quantity: int = 1
    variant_adjustment: Decimal | None = None  # None when no variant selected
    lens_type_adjustment: Decimal | None = None  # None when no lens type selected


@dataclass(frozen=True)
class PriceQuote:
    unit_price: Decimal
    line_total: Decimal
    quantity: int


@dataclass(frozen=True)
class ShippingPolicy:
    """Flat shipping fee, waived above a subtotal threshold."""

    free_shipping_threshold: Decimal
    flat_fee: Decimal


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
