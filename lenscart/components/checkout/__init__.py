"""
Checkout component - turns a cart into an order.
"""

from .component import (
    DEFAULT_CHECKOUT,
    check_lines,
    generate_order_number,
    run_place_order,
    validate_checkout,
)
from .models import CheckoutError, CheckoutSettings, PlaceOrderInput, PlaceOrderOutput
from .ports import ClockPort

__all__ = [
    # Entry points
    "run_place_order",
    # Helpers
    "check_lines",
    "generate_order_number",
    "validate_checkout",
    "DEFAULT_CHECKOUT",
    # Models
    "CheckoutError",
    "CheckoutSettings",
    "PlaceOrderInput",
    "PlaceOrderOutput",
    # Ports
    "ClockPort",
]
