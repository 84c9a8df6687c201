"""
Orders component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from lenscart.domain.entities import Order


class OrderRepoPort(Protocol):
    """Repository interface for orders and their line items."""

    def save_order(self, order: Order) -> Order:
        """Insert an order together with its items in one transaction."""
        ...

    def get_order(self, order_id: UUID) -> Order | None:
        """Get order with items by ID."""
        ...

    def get_by_number(self, order_number: str) -> Order | None:
        """Get order with items by order number."""
        ...

    def order_number_exists(self, order_number: str) -> bool:
        """Check whether an order number is taken."""
        ...

    def list_orders(self, user_id: UUID | None = None) -> list[Order]:
        """List orders newest first, optionally for one user."""
        ...

    def update_order(self, order: Order) -> Order:
        """Update order header fields. Items are left untouched."""
        ...
