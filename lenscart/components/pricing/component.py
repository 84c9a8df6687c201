"""
Pricing component - line item and order totals.

unit_price = base + variant adjustment (if a variant is selected)
                  + lens type adjustment (if a lens type is selected)
line_total = unit_price * quantity

The lens type adjustment is never gated on has_eyesight.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from lenscart.components.lens_config import LensConfiguration
from lenscart.domain.entities import LensType, Product, ProductVariant

from .models import OrderTotals, PriceQuote, QuoteInput, ShippingPolicy

DEFAULT_SHIPPING = ShippingPolicy(
    free_shipping_threshold=Decimal("5000"),
    flat_fee=Decimal("200"),
)


def run_quote(inp: QuoteInput) -> PriceQuote:
    """
    Price one line item.

    Raises:
        ValueError: negative base price or non-positive quantity.
    """
    if inp.base_price < 0:
        raise ValueError(f"base_price must be non-negative, got {inp.base_price}")
    if isinstance(inp.quantity, bool) or not isinstance(inp.quantity, int) or inp.quantity < 1:
        raise ValueError(f"quantity must be a positive integer, got {inp.quantity!r}")

    unit_price = inp.base_price
    if inp.variant_adjustment is not None:
        unit_price += inp.variant_adjustment
    if inp.lens_type_adjustment is not None:
        unit_price += inp.lens_type_adjustment

    return PriceQuote(
        unit_price=unit_price,
        line_total=unit_price * inp.quantity,
        quantity=inp.quantity,
    )


def find_lens_type(lens_types: Iterable[LensType], lens_type_id: object) -> LensType | None:
    for lens_type in lens_types:
        if lens_type.id == lens_type_id:
            return lens_type
    return None


def quote_for_configuration(
    product: Product,
    variant: ProductVariant | None,
    lens_types: Iterable[LensType],
    configuration: LensConfiguration,
    quantity: int = 1,
) -> PriceQuote:
    """Resolve adjustments from catalog rows and price the line."""
    lens_adjustment: Decimal | None = None
    if configuration.lens_type_id is not None:
        lens_type = find_lens_type(lens_types, configuration.lens_type_id)
        if lens_type is not None:
            lens_adjustment = lens_type.price_adjustment

    return run_quote(
        QuoteInput(
            base_price=product.base_price,
            quantity=quantity,
            variant_adjustment=variant.price_adjustment if variant else None,
            lens_type_adjustment=lens_adjustment,
        )
    )


def compute_order_totals(
    line_totals: Iterable[Decimal],
    policy: ShippingPolicy = DEFAULT_SHIPPING,
) -> OrderTotals:
    """Subtotal, shipping and grand total for a set of priced lines."""
    subtotal = sum(line_totals, Decimal("0"))
    shipping_cost = Decimal("0") if subtotal > policy.free_shipping_threshold else policy.flat_fee
    return OrderTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total=subtotal + shipping_cost,
    )


def format_price(amount: Decimal, symbol: str = "Rs.") -> str:
    """Display form used on the storefront, e.g. 'Rs. 7,200'."""
    if amount == amount.to_integral_value():
        return f"{symbol} {int(amount):,}"
    return f"{symbol} {amount:,.2f}"
