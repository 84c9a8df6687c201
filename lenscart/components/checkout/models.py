"""
Checkout component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from lenscart.domain.entities import Order


@dataclass(frozen=True)
class CheckoutError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class CheckoutSettings:
    """Order rules from configuration."""

    number_prefix: str = "TE"
    payment_methods: tuple[str, ...] = ("jazzcash", "easypaisa", "bank_transfer", "card", "cod")
    required_address_fields: tuple[str, ...] = ("full_name", "phone", "address_line1", "city")
    free_shipping_threshold: Decimal = Decimal("5000")
    flat_fee: Decimal = Decimal("200")


@dataclass(frozen=True)
class PlaceOrderInput:
    """Checkout is only open to signed-in customers."""

    user_id: UUID
    shipping_address: Mapping[str, str | None]
    payment_method: str
    customer_notes: str | None = None


@dataclass(frozen=True)
class PlaceOrderOutput:
    order: Order | None
    errors: list[CheckoutError] = field(default_factory=list)
    success: bool = True
    cart_cleared: bool = False
