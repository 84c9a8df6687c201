"""
Serialization component - lens configuration round trip.

Converts a LensConfiguration into the LensRecord stored on cart and order
lines and back, and renders stored records for fulfillment staff.

Invariants:
- I1: from_record(to_record(c)) == c for every valid configuration c
- I2: prescription strings are stored exactly as entered
- I3: "no lens type" (None) stays distinct from a zero-priced lens type
- I4: prism rows render only when prism correction was requested
"""

from __future__ import annotations

from dataclasses import asdict, replace

from lenscart.components.lens_config import (
    EyeData,
    LensConfiguration,
    ManualPrescription,
    PrescriptionFileRef,
    PrescriptionRecord,
    PrismData,
    UploadPrescription,
)
from lenscart.domain.entities import (
    EyeRecord,
    LensRecord,
    PrescriptionDataRecord,
    PrescriptionFileRecord,
    PrismRecord,
)

from .models import EYESIGHT_LABEL, NO_EYESIGHT_LABEL, EyeRow, FulfillmentView, PrismRow

# --- Configuration -> Record ---


def _prism_to_record(prism: PrismData | None) -> PrismRecord | None:
    if prism is None:
        return None
    return PrismRecord(**asdict(prism))


def _data_to_record(record: PrescriptionRecord) -> PrescriptionDataRecord:
    return PrescriptionDataRecord(
        right_eye=EyeRecord(**asdict(record.right_eye)),
        left_eye=EyeRecord(**asdict(record.left_eye)),
        two_pd_numbers=record.two_pd_numbers,
        add_prism=record.add_prism,
        right_prism=_prism_to_record(record.right_prism) if record.add_prism else None,
        left_prism=_prism_to_record(record.left_prism) if record.add_prism else None,
    )


def to_record(config: LensConfiguration) -> LensRecord:
    """Freeze a configuration into its persisted shape."""
    data = config.prescription_data
    image = config.prescription_image
    return LensRecord(
        has_eyesight=config.has_eyesight,
        lens_type_id=config.lens_type_id,
        prescription_type=config.prescription_type,
        prescription_data=_data_to_record(data) if data is not None else None,
        prescription_file=PrescriptionFileRecord(**asdict(image)) if image is not None else None,
    )


# --- Record -> Configuration ---


def _prism_from_record(prism: PrismRecord | None) -> PrismData:
    if prism is None:
        return PrismData()
    return PrismData(**prism.model_dump())


def _data_from_record(data: PrescriptionDataRecord | None) -> PrescriptionRecord:
    if data is None:
        return PrescriptionRecord()
    return PrescriptionRecord(
        right_eye=EyeData(**data.right_eye.model_dump()),
        left_eye=EyeData(**data.left_eye.model_dump()),
        two_pd_numbers=data.two_pd_numbers,
        add_prism=data.add_prism,
        # Stored prism values are ignored entirely when prism was not requested
        right_prism=_prism_from_record(data.right_prism) if data.add_prism else None,
        left_prism=_prism_from_record(data.left_prism) if data.add_prism else None,
    )


def from_record(record: LensRecord) -> LensConfiguration:
    """Rebuild the configuration captured on a cart or order line."""
    if not record.has_eyesight:
        return LensConfiguration(has_eyesight=False, lens_type_id=record.lens_type_id)

    prescription: UploadPrescription | ManualPrescription | None = None
    if record.prescription_type == "upload":
        file_ref = record.prescription_file
        prescription = UploadPrescription(
            file=PrescriptionFileRef(**file_ref.model_dump()) if file_ref else None
        )
    elif record.prescription_type == "manual":
        prescription = ManualPrescription(record=_data_from_record(record.prescription_data))

    return LensConfiguration(
        has_eyesight=True,
        lens_type_id=record.lens_type_id,
        prescription=prescription,
    )


def dumps_record(record: LensRecord) -> str:
    """JSON text for storage. Prescription keys use the stored wire names."""
    return record.model_dump_json(by_alias=True)


def loads_record(text: str | None) -> LensRecord:
    if not text:
        return LensRecord()
    return LensRecord.model_validate_json(text)


# --- Fulfillment View ---


def render_for_fulfillment(
    config: LensConfiguration,
    lens_type_name: str | None = None,
) -> FulfillmentView:
    """
    Lay out a captured configuration for the people cutting the lens.

    PD is shown per eye only when two PD numbers were given; the prism table
    only when prism correction was requested.
    """
    base = FulfillmentView(
        lens_option=EYESIGHT_LABEL if config.has_eyesight else NO_EYESIGHT_LABEL,
        lens_type_id=config.lens_type_id,
        lens_type_name=lens_type_name,
        prescription_type=config.prescription_type,
    )

    if isinstance(config.prescription, UploadPrescription):
        return replace(base, file=config.prescription.file)

    record = config.prescription_data
    if record is None:
        return base

    right, left = record.right_eye, record.left_eye
    eye_rows = [
        EyeRow(
            label=label,
            sph=eye.sph,
            cyl=eye.cyl,
            axis=eye.axis,
            add=eye.add,
            pd=eye.pd if record.two_pd_numbers else "",
        )
        for label, eye in (("Right Eye (OD)", right), ("Left Eye (OS)", left))
    ]

    if record.two_pd_numbers:
        pd_display = f"R {right.pd or '-'} / L {left.pd or '-'}"
    else:
        pd_display = right.pd or None

    prism_rows: list[PrismRow] = []
    if record.add_prism:
        for label, prism in (("Right Eye (OD)", record.right_prism), ("Left Eye (OS)", record.left_prism)):
            p = prism or PrismData()
            prism_rows.append(
                PrismRow(
                    label=label,
                    vertical_prism=p.vertical_prism,
                    vertical_base=p.vertical_base,
                    horizontal_prism=p.horizontal_prism,
                    horizontal_base=p.horizontal_base,
                )
            )

    return replace(
        base,
        eye_rows=eye_rows,
        two_pd_numbers=record.two_pd_numbers,
        pd_display=pd_display,
        show_prism_table=record.add_prism,
        prism_rows=prism_rows,
    )


def format_fulfillment_sheet(view: FulfillmentView) -> str:
    """Plain-text rendering for terminals and packing slips."""
    lines = [f"Lens option: {view.lens_option}"]
    if view.lens_type_id is not None:
        lines.append(f"Lens type:   {view.lens_type_name or view.lens_type_id}")
    else:
        lines.append("Lens type:   (none)")

    if view.prescription_type == "upload":
        if view.file is not None:
            lines.append(
                f"Prescription: uploaded file {view.file.filename} "
                f"({view.file.content_type}, {view.file.size_bytes} bytes)"
            )
            lines.append(f"Stored at:    {view.file.storage_key}")
        else:
            lines.append("Prescription: upload selected, no file attached")
        return "\n".join(lines)

    if not view.eye_rows:
        return "\n".join(lines)

    lines.append("Prescription: entered manually")
    header = f"  {'Eye':<16}{'SPH':>8}{'CYL':>8}{'AXIS':>6}{'ADD':>8}"
    if view.two_pd_numbers:
        header += f"{'PD':>7}"
    lines.append(header)
    for row in view.eye_rows:
        line = f"  {row.label:<16}{row.sph:>8}{row.cyl:>8}{row.axis:>6}{row.add:>8}"
        if view.two_pd_numbers:
            line += f"{row.pd:>7}"
        lines.append(line)
    if not view.two_pd_numbers:
        lines.append(f"  PD: {view.pd_display or '-'}")

    if view.show_prism_table:
        lines.append("  Prism:")
        lines.append(f"  {'Eye':<16}{'Vert':>6}{'Base':>6}{'Horiz':>7}{'Base':>6}")
        for prism in view.prism_rows:
            lines.append(
                f"  {prism.label:<16}{prism.vertical_prism:>6}{prism.vertical_base:>6}"
                f"{prism.horizontal_prism:>7}{prism.horizontal_base:>6}"
            )

    return "\n".join(lines)
