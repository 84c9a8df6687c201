"""
Orders component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from lenscart.components.serialization import FulfillmentView
from lenscart.domain.entities import Order, OrderItem


@dataclass(frozen=True)
class OrderError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class OrderOutput:
    order: Order | None
    errors: list[OrderError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class OrderListOutput:
    orders: list[Order]
    total: int


@dataclass(frozen=True)
class OrderLineDetail:
    """One order line as fulfillment staff review it."""

    item: OrderItem
    product_title: str | None
    variant_label: str | None
    fulfillment: FulfillmentView


@dataclass(frozen=True)
class OrderDetailOutput:
    order: Order | None
    lines: list[OrderLineDetail] = field(default_factory=list)
    errors: list[OrderError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class UpdateOrderInput:
    order_id: UUID
    status: str | None = None
    tracking_number: str | None = None
