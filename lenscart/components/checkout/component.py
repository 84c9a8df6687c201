"""
Checkout component - turns a cart into an order.

Invariants:
- I1: each order line carries the cart line's lens record unchanged
- I2: unit and line prices are frozen on the order at placement
- I3: the cart is cleared only after the order and its items are saved
- I4: every line is re-checked against the current catalog before ordering
"""

from __future__ import annotations

import logging
import random
import sqlite3
from datetime import datetime
from uuid import uuid4

from lenscart.components.cart import CartLine, CartOwner, CartRepoPort, price_lines
from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.lens_config import check_eligibility
from lenscart.components.orders import OrderRepoPort
from lenscart.components.pricing import ShippingPolicy, compute_order_totals
from lenscart.components.serialization import from_record
from lenscart.domain.entities import Order, OrderItem, ShippingAddress

from .models import CheckoutError, CheckoutSettings, PlaceOrderInput, PlaceOrderOutput
from .ports import ClockPort

logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT = CheckoutSettings()
MAX_ORDER_NUMBER_ATTEMPTS = 10

_ADDRESS_LABELS = {
    "full_name": "Full name",
    "phone": "Phone",
    "address_line1": "Address",
    "city": "City",
    "state": "State",
    "postal_code": "Postal code",
}


def generate_order_number(prefix: str, now: datetime) -> str:
    """Order number like TE20260115-0042."""
    return f"{prefix}{now:%Y%m%d}-{random.randint(0, 9999):04d}"


def _next_order_number(prefix: str, now: datetime, repo: OrderRepoPort) -> str:
    for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number(prefix, now)
        if not repo.order_number_exists(number):
            return number
    raise RuntimeError(f"No free order number for {now:%Y-%m-%d} after {MAX_ORDER_NUMBER_ATTEMPTS} attempts")


def validate_checkout(inp: PlaceOrderInput, settings: CheckoutSettings) -> list[CheckoutError]:
    errors: list[CheckoutError] = []
    for name in settings.required_address_fields:
        value = inp.shipping_address.get(name)
        if not value or not str(value).strip():
            errors.append(
                CheckoutError(
                    code="address_incomplete",
                    message=f"{_ADDRESS_LABELS.get(name, name)} is required",
                    field=f"shipping_address.{name}",
                )
            )
    if inp.payment_method not in settings.payment_methods:
        errors.append(
            CheckoutError(
                code="invalid_payment_method",
                message=f"Payment method must be one of: {', '.join(settings.payment_methods)}",
                field="payment_method",
            )
        )
    return errors


def check_lines(lines: list[CartLine]) -> list[CheckoutError]:
    """
    Re-check each cart line against the catalog as it is now.

    Products, variants and lens types can change after a line was added.
    """
    errors: list[CheckoutError] = []
    for line in lines:
        item, title = line.item, line.product.title
        field_name = f"items.{item.id}"
        if not line.product.is_active:
            errors.append(
                CheckoutError(
                    code="item_unavailable",
                    message=f"{title} is no longer available, please remove it from your cart",
                    field=field_name,
                )
            )
            continue
        if item.variant_id is not None and (line.variant is None or line.variant.stock <= 0):
            errors.append(
                CheckoutError(
                    code="out_of_stock",
                    message=f"The selected option of {title} is out of stock",
                    field=field_name,
                )
            )
        lens_type = line.lens_type
        if item.lens.lens_type_id is not None and (
            lens_type is None or lens_type.product_id != line.product.id or not lens_type.is_enabled
        ):
            errors.append(
                CheckoutError(
                    code="lens_type_unavailable",
                    message=f"The lens chosen for {title} is no longer offered, please choose another",
                    field=field_name,
                )
            )
        errors.extend(
            CheckoutError(code=e.code, message=e.message, field=field_name)
            for e in check_eligibility(from_record(item.lens), line.product.has_lens_options)
        )
    return errors


def _clean_address(raw: dict[str, str | None]) -> ShippingAddress:
    cleaned = {k: (v.strip() if isinstance(v, str) else v) for k, v in raw.items()}
    return ShippingAddress(**{k: (v or None) for k, v in cleaned.items() if k in ShippingAddress.model_fields})


# --- Component Entry Point ---


def run_place_order(
    inp: PlaceOrderInput,
    *,
    cart_repo: CartRepoPort,
    order_repo: OrderRepoPort,
    catalog: CatalogRepoPort,
    clock: ClockPort,
    settings: CheckoutSettings = DEFAULT_CHECKOUT,
) -> PlaceOrderOutput:
    """
    Place an order for everything in the customer's cart.

    A failed save keeps the cart as it was so the customer can retry.
    """
    errors = validate_checkout(inp, settings)
    if errors:
        return PlaceOrderOutput(order=None, errors=errors, success=False)

    owner = CartOwner(user_id=inp.user_id)
    lines = price_lines(cart_repo.list_items(owner), catalog)
    if not lines:
        return PlaceOrderOutput(
            order=None,
            errors=[CheckoutError(code="cart_empty", message="Your cart is empty")],
            success=False,
        )

    line_errors = check_lines(lines)
    if line_errors:
        logger.info("Checkout blocked for user %s: %s", inp.user_id, line_errors[0].code)
        return PlaceOrderOutput(order=None, errors=line_errors, success=False)

    totals = compute_order_totals(
        (line.line_total for line in lines),
        ShippingPolicy(settings.free_shipping_threshold, settings.flat_fee),
    )
    now = clock.now_utc()
    order_id = uuid4()
    items = [
        OrderItem(
            order_id=order_id,
            product_id=line.item.product_id,
            variant_id=line.item.variant_id,
            quantity=line.item.quantity,
            unit_price=line.unit_price,
            total_price=line.line_total,
            lens=line.item.lens,
            created_at=now,
        )
        for line in lines
    ]

    try:
        order = Order(
            id=order_id,
            user_id=inp.user_id,
            order_number=_next_order_number(settings.number_prefix, now, order_repo),
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total=totals.total,
            payment_method=inp.payment_method,  # type: ignore[arg-type]
            shipping_address=_clean_address(dict(inp.shipping_address)),
            customer_notes=(inp.customer_notes or "").strip() or None,
            items=items,
            created_at=now,
            updated_at=now,
        )
        saved = order_repo.save_order(order)
    except (sqlite3.Error, RuntimeError):
        logger.exception("Failed to place order for user %s", inp.user_id)
        return PlaceOrderOutput(
            order=None,
            errors=[
                CheckoutError(
                    code="persistence_failed",
                    message="Failed to place order. Please try again.",
                )
            ],
            success=False,
        )

    logger.info(
        "Placed order %s: %d line(s), total %s",
        saved.order_number,
        len(saved.items),
        saved.total,
    )

    try:
        cart_repo.clear(owner)
    except sqlite3.Error:
        logger.exception("Order %s placed but the cart could not be cleared", saved.order_number)
        return PlaceOrderOutput(order=saved, cart_cleared=False)

    return PlaceOrderOutput(order=saved, cart_cleared=True)
