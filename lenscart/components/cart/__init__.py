"""
Cart component - cart lines carrying a frozen lens configuration.
"""

from .component import (
    DEFAULT_MAX_QUANTITY,
    price_lines,
    run_add,
    run_list,
    run_remove,
    run_update_quantity,
)
from .models import (
    AddToCartInput,
    CartError,
    CartItemOutput,
    CartLine,
    CartListOutput,
    CartOwner,
    RemoveItemInput,
    UpdateQuantityInput,
)
from .ports import CartRepoPort

__all__ = [
    # Entry points
    "run_add",
    "run_update_quantity",
    "run_remove",
    "run_list",
    # Helpers
    "price_lines",
    "DEFAULT_MAX_QUANTITY",
    # Models
    "CartOwner",
    "CartError",
    "AddToCartInput",
    "UpdateQuantityInput",
    "RemoveItemInput",
    "CartItemOutput",
    "CartLine",
    "CartListOutput",
    # Ports
    "CartRepoPort",
]
