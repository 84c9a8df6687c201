"""
Orders component - order review and back-office updates.
"""

from .component import (
    ORDER_STATUSES,
    build_line_details,
    find_item,
    run_get_order,
    run_list_orders,
    run_order_detail,
    run_update_order,
    variant_label,
)
from .models import (
    OrderDetailOutput,
    OrderError,
    OrderLineDetail,
    OrderListOutput,
    OrderOutput,
    UpdateOrderInput,
)
from .ports import OrderRepoPort

__all__ = [
    # Entry points
    "run_get_order",
    "run_list_orders",
    "run_order_detail",
    "run_update_order",
    # Helpers
    "build_line_details",
    "find_item",
    "variant_label",
    "ORDER_STATUSES",
    # Models
    "OrderError",
    "OrderOutput",
    "OrderListOutput",
    "OrderLineDetail",
    "OrderDetailOutput",
    "UpdateOrderInput",
    # Ports
    "OrderRepoPort",
]
