"""
Pricing component - line item and order totals.
"""

from .component import (
    DEFAULT_SHIPPING,
    compute_order_totals,
    find_lens_type,
    format_price,
    quote_for_configuration,
    run_quote,
)
from .models import OrderTotals, PriceQuote, QuoteInput, ShippingPolicy

__all__ = [
    # Entry points
    "run_quote",
    "quote_for_configuration",
    "compute_order_totals",
    # Helpers
    "find_lens_type",
    "format_price",
    "DEFAULT_SHIPPING",
    # Models
    "QuoteInput",
    "PriceQuote",
    "ShippingPolicy",
    "OrderTotals",
]
