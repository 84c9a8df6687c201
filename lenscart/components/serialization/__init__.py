"""
Serialization component - lens configuration round trip and fulfillment view.
"""

from .component import (
    dumps_record,
    format_fulfillment_sheet,
    from_record,
    loads_record,
    render_for_fulfillment,
    to_record,
)
from .models import (
    EYESIGHT_LABEL,
    NO_EYESIGHT_LABEL,
    EyeRow,
    FulfillmentView,
    PrismRow,
)

__all__ = [
    "to_record",
    "from_record",
    "dumps_record",
    "loads_record",
    "render_for_fulfillment",
    "format_fulfillment_sheet",
    "FulfillmentView",
    "EyeRow",
    "PrismRow",
    "EYESIGHT_LABEL",
    "NO_EYESIGHT_LABEL",
]
