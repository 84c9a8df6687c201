"""
Cart component - Port interfaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from lenscart.domain.entities import CartItem

if TYPE_CHECKING:
    from .models import CartOwner


class CartRepoPort(Protocol):
    """Repository interface for cart lines."""

    def list_items(self, owner: CartOwner) -> list[CartItem]:
        """List an owner's cart lines, oldest first."""
        ...

    def get_item(self, item_id: UUID) -> CartItem | None:
        """Get cart line by ID."""
        ...

    def save_item(self, item: CartItem) -> CartItem:
        """Insert or update a cart line."""
        ...

    def delete_item(self, item_id: UUID) -> None:
        """Delete a cart line."""
        ...

    def clear(self, owner: CartOwner) -> int:
        """Delete all of an owner's cart lines. Returns count removed."""
        ...
