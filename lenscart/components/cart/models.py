"""
Cart component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from lenscart.components.lens_config import LensConfiguration
from lenscart.domain.entities import CartItem, LensType, Product, ProductVariant


@dataclass(frozen=True)
class CartOwner:
    """
    Who a cart belongs to: a signed-in user, else an anonymous session.

    Exactly one of user_id / session_id is set.
    """

    user_id: UUID | None = None
    session_id: str | None = None

    def __post_init__(self) -> None:
        if (self.user_id is None) == (self.session_id is None):
            raise ValueError("CartOwner needs exactly one of user_id or session_id")

    @property
    def key(self) -> str:
        """Stable string used to scope this owner's stored prescriptions."""
        return str(self.user_id) if self.user_id is not None else str(self.session_id)

    def owns(self, item: CartItem) -> bool:
        if self.user_id is not None:
            return item.user_id == self.user_id
        return item.user_id is None and item.session_id == self.session_id


@dataclass(frozen=True)
class CartError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class AddToCartInput:
    owner: CartOwner
    product_id: UUID
    configuration: LensConfiguration = field(default_factory=LensConfiguration)
    variant_id: UUID | None = None
    quantity: int = 1


@dataclass(frozen=True)
class UpdateQuantityInput:
    owner: CartOwner
    item_id: UUID
    quantity: int


@dataclass(frozen=True)
class RemoveItemInput:
    owner: CartOwner
    item_id: UUID


@dataclass(frozen=True)
class CartItemOutput:
    item: CartItem | None
    errors: list[CartError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CartLine:
    """A cart line with its catalog rows and current price."""

    item: CartItem
    product: Product
    variant: ProductVariant | None
    lens_type: LensType | None
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class CartListOutput:
    lines: list[CartLine]
    count: int  # total quantity, shown on the cart badge
    subtotal: Decimal
