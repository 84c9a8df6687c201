"""
Serialization component models - fulfillment view of a stored configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from lenscart.components.lens_config import PrescriptionFileRef, PrescriptionType

NO_EYESIGHT_LABEL = "No Eyesight (Zero Power)"
EYESIGHT_LABEL = "Eyesight Lenses (Prescription)"


@dataclass(frozen=True)
class EyeRow:
    label: str
    sph: str
    cyl: str
    axis: str
    add: str
    pd: str  # empty in single PD mode, see FulfillmentView.pd_display


@dataclass(frozen=True)
class PrismRow:
    label: str
    vertical_prism: str
    vertical_base: str
    horizontal_prism: str
    horizontal_base: str


@dataclass(frozen=True)
class FulfillmentView:
    """What fulfillment staff see for one order line."""

    lens_option: str
    lens_type_id: UUID | None = None
    lens_type_name: str | None = None
    prescription_type: PrescriptionType | None = None
    file: PrescriptionFileRef | None = None
    eye_rows: list[EyeRow] = field(default_factory=list)
    two_pd_numbers: bool = False
    pd_display: str | None = None
    show_prism_table: bool = False
    prism_rows: list[PrismRow] = field(default_factory=list)
