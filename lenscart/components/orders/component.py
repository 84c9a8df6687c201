"""
Orders component - order review and back-office updates.

Invariants:
- I1: a customer sees only their own orders; admins see all
- I2: line items, and the lens configuration on them, are never modified
- I3: status is one of the configured order statuses
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import UUID

from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.serialization import from_record, render_for_fulfillment
from lenscart.domain.entities import Order, OrderItem, ProductVariant, User

from .models import (
    OrderDetailOutput,
    OrderError,
    OrderLineDetail,
    OrderListOutput,
    OrderOutput,
    UpdateOrderInput,
)
from .ports import OrderRepoPort

logger = logging.getLogger(__name__)

ORDER_STATUSES: tuple[str, ...] = ("pending", "processing", "shipped", "delivered", "cancelled")


def _not_found(order_id: object) -> list[OrderError]:
    return [OrderError(code="order_not_found", message=f"Order {order_id} not found", field="order_id")]


def variant_label(variant: ProductVariant | None) -> str | None:
    """Human label for a variant, e.g. 'Black / Medium'."""
    if variant is None:
        return None
    parts = [p for p in (variant.color, variant.size, variant.material) if p]
    return " / ".join(parts) if parts else variant.sku


def find_item(order: Order, item_id: UUID) -> OrderItem | None:
    for item in order.items:
        if item.id == item_id:
            return item
    return None


# --- Component Entry Points ---


def run_get_order(order_id: UUID, viewer: User, *, repo: OrderRepoPort) -> OrderOutput:
    """Get an order for its owner or an admin."""
    order = repo.get_order(order_id)
    if order is None:
        return OrderOutput(order=None, errors=_not_found(order_id), success=False)

    if not viewer.is_admin and order.user_id != viewer.id:
        # Same answer as a missing order, so ids cannot be guessed.
        return OrderOutput(order=None, errors=_not_found(order_id), success=False)

    return OrderOutput(order=order)


def run_list_orders(*, repo: OrderRepoPort, user_id: UUID | None = None) -> OrderListOutput:
    """List orders newest first; all orders when user_id is None."""
    orders = sorted(repo.list_orders(user_id), key=lambda o: o.created_at, reverse=True)
    return OrderListOutput(orders=orders, total=len(orders))


def build_line_details(order: Order, catalog: CatalogRepoPort) -> list[OrderLineDetail]:
    lines: list[OrderLineDetail] = []
    for item in order.items:
        product = catalog.get_product(item.product_id) if item.product_id else None
        variant = catalog.get_variant(item.variant_id) if item.variant_id else None
        lens_type_name = None
        if item.lens.lens_type_id is not None:
            lens_type = catalog.get_lens_type(item.lens.lens_type_id)
            lens_type_name = lens_type.name if lens_type else None
        lines.append(
            OrderLineDetail(
                item=item,
                product_title=product.title if product else None,
                variant_label=variant_label(variant),
                fulfillment=render_for_fulfillment(from_record(item.lens), lens_type_name),
            )
        )
    return lines


def run_order_detail(
    order_id: UUID,
    *,
    repo: OrderRepoPort,
    catalog: CatalogRepoPort,
) -> OrderDetailOutput:
    """Order with a fulfillment view for every line."""
    order = repo.get_order(order_id)
    if order is None:
        return OrderDetailOutput(order=None, errors=_not_found(order_id), success=False)
    return OrderDetailOutput(order=order, lines=build_line_details(order, catalog))


def run_update_order(
    inp: UpdateOrderInput,
    *,
    repo: OrderRepoPort,
    statuses: Sequence[str] = ORDER_STATUSES,
) -> OrderOutput:
    """Change an order's status and/or tracking number."""
    if inp.status is not None and inp.status not in statuses:
        return OrderOutput(
            order=None,
            errors=[
                OrderError(
                    code="invalid_status",
                    message=f"Status must be one of: {', '.join(statuses)}",
                    field="status",
                )
            ],
            success=False,
        )

    order = repo.get_order(inp.order_id)
    if order is None:
        return OrderOutput(order=None, errors=_not_found(inp.order_id), success=False)

    updates: dict[str, object] = {"updated_at": datetime.now(UTC)}
    if inp.status is not None:
        updates["status"] = inp.status
    if inp.tracking_number is not None:
        updates["tracking_number"] = inp.tracking_number.strip() or None

    updated = order.model_copy(update=updates)
    try:
        saved = repo.update_order(updated)
    except sqlite3.Error:
        logger.exception("Failed to update order %s", order.order_number)
        return OrderOutput(
            order=None,
            errors=[OrderError(code="persistence_failed", message="Could not update the order, please try again")],
            success=False,
        )

    if saved.status != order.status:
        logger.info("Order %s status %s -> %s", saved.order_number, order.status, saved.status)
    return OrderOutput(order=saved)
