"""
Lens configuration component - prescription and lens-type builder.

Holds the shopper's lens choices as one BuilderState and transforms it with a
pure reducer per event. Every transition yields a full LensConfiguration
snapshot for pricing and cart persistence.

Invariants:
- I1: has_eyesight=False snapshots carry no prescription
- I2: exactly one prescription branch is emitted, chosen by prescription_type
- I3: prism values are emitted only when add_prism is set
- I4: single PD mode keeps both eyes' pd identical
- I5: a completed upload applies only if its token is still pending
- I6: rejected events leave the state unchanged
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable
from dataclasses import replace
from decimal import Decimal
from typing import Any

from .models import (
    BeginUpload,
    BuilderEvent,
    BuilderState,
    CompleteUpload,
    ConfigError,
    EyeData,
    FailUpload,
    FileConstraints,
    LensConfiguration,
    ManualPrescription,
    PrescriptionRecord,
    PrescriptionType,
    PrismData,
    RemoveUploadedImage,
    SelectEyesightMode,
    SelectLensType,
    SelectPrescriptionMethod,
    SetEyeField,
    SetPrismField,
    SetPupillaryDistanceMode,
    TogglePrism,
    Transition,
    UploadPrescription,
    UploadToken,
)

logger = logging.getLogger(__name__)

# --- Default Configuration ---

MAX_PRESCRIPTION_BYTES = 5 * 1024 * 1024

DEFAULT_FILE_CONSTRAINTS = FileConstraints(
    allowed_mime_types=("image/jpeg", "image/jpg", "image/png", "application/pdf"),
    max_upload_bytes=MAX_PRESCRIPTION_BYTES,
)


# --- Option Lists ---


def _format_power(value: Decimal) -> str:
    if value > 0:
        return f"+{value:.2f}"
    if value == 0:
        return "0.00"
    return f"{value:.2f}"


def _format_mm(value: Decimal) -> str:
    return f"{value:.1f}".removesuffix(".0")


def _steps(low: str, high: str, step: str) -> list[Decimal]:
    values = []
    current, end, inc = Decimal(low), Decimal(high), Decimal(step)
    while current <= end:
        values.append(current)
        current += inc
    return values


SPH_OPTIONS: tuple[str, ...] = tuple(_format_power(v) for v in _steps("-16", "16", "0.25"))
CYL_OPTIONS: tuple[str, ...] = SPH_OPTIONS
AXIS_OPTIONS: tuple[str, ...] = tuple(str(v) for v in range(0, 181))
ADD_OPTIONS: tuple[str, ...] = tuple(_format_power(v) for v in _steps("0", "6", "0.25"))
SINGLE_PD_OPTIONS: tuple[str, ...] = tuple(str(v) for v in range(50, 81))
DUAL_PD_OPTIONS: tuple[str, ...] = tuple(_format_mm(v) for v in _steps("25", "40", "0.5"))
PRISM_OPTIONS: tuple[str, ...] = tuple(f"{v:.2f}" for v in _steps("0", "5", "0.5"))
VERTICAL_BASE_OPTIONS: tuple[str, ...] = ("n/a", "Up", "Down")
HORIZONTAL_BASE_OPTIONS: tuple[str, ...] = ("n/a", "In", "Out")

EYE_FIELD_OPTIONS: dict[str, tuple[str, ...]] = {
    "sph": SPH_OPTIONS,
    "cyl": CYL_OPTIONS,
    "axis": AXIS_OPTIONS,
    "add": ADD_OPTIONS,
}

PRISM_FIELD_OPTIONS: dict[str, tuple[str, ...]] = {
    "vertical_prism": PRISM_OPTIONS,
    "vertical_base": VERTICAL_BASE_OPTIONS,
    "horizontal_prism": PRISM_OPTIONS,
    "horizontal_base": HORIZONTAL_BASE_OPTIONS,
}


def pd_options(two_pd_numbers: bool) -> tuple[str, ...]:
    return DUAL_PD_OPTIONS if two_pd_numbers else SINGLE_PD_OPTIONS


# --- Validation Functions ---


def validate_prescription_file(
    content_type: str,
    size_bytes: int,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> list[ConfigError]:
    """
    Validate an uploaded prescription's MIME type and size.

    Returns list of errors (empty if valid).
    """
    errors: list[ConfigError] = []

    if content_type not in constraints.allowed_mime_types:
        errors.append(
            ConfigError(
                code="invalid_mime_type",
                message="Invalid file type. Please upload a JPG, PNG, or PDF file",
                field="prescription_image",
            )
        )
        return errors

    if size_bytes > constraints.max_upload_bytes:
        limit_mb = constraints.max_upload_bytes // (1024 * 1024)
        errors.append(
            ConfigError(
                code="file_too_large",
                message=f"File too large. Please upload a file smaller than {limit_mb}MB",
                field="prescription_image",
            )
        )

    return errors


def _check_option(value: str, options: tuple[str, ...], field_name: str) -> list[ConfigError]:
    if value in options:
        return []
    return [
        ConfigError(
            code="invalid_option",
            message=f"'{value}' is not a valid value for {field_name}",
            field=field_name,
        )
    ]


def _check_eye(eye: EyeData, prefix: str, two_pd_numbers: bool) -> list[ConfigError]:
    errors: list[ConfigError] = []
    for name, options in EYE_FIELD_OPTIONS.items():
        value = getattr(eye, name)
        if value:
            errors.extend(_check_option(value, options, f"{prefix}.{name}"))
    if eye.pd:
        errors.extend(_check_option(eye.pd, pd_options(two_pd_numbers), f"{prefix}.pd"))
    return errors


def _check_prism(prism: PrismData | None, prefix: str) -> list[ConfigError]:
    if prism is None:
        return [
            ConfigError(
                code="invalid_option",
                message=f"{prefix} is required when prism correction is enabled",
                field=prefix,
            )
        ]
    errors: list[ConfigError] = []
    for name, options in PRISM_FIELD_OPTIONS.items():
        errors.extend(_check_option(getattr(prism, name), options, f"{prefix}.{name}"))
    return errors


def validate_configuration(
    config: LensConfiguration,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> list[ConfigError]:
    """
    Validate a snapshot received from outside the builder.

    Checks option domains and the snapshot invariants. Completeness is a
    separate question answered by check_eligibility.
    """
    errors: list[ConfigError] = []

    if not config.has_eyesight and config.prescription is not None:
        errors.append(
            ConfigError(
                code="inconsistent_configuration",
                message="A prescription cannot be attached to a zero-power lens",
                field="prescription",
            )
        )

    image = config.prescription_image
    if image is not None:
        errors.extend(validate_prescription_file(image.content_type, image.size_bytes, constraints))

    record = config.prescription_data
    if record is not None:
        errors.extend(_check_eye(record.right_eye, "right_eye", record.two_pd_numbers))
        errors.extend(_check_eye(record.left_eye, "left_eye", record.two_pd_numbers))
        if not record.two_pd_numbers and record.right_eye.pd != record.left_eye.pd:
            errors.append(
                ConfigError(
                    code="pd_mismatch",
                    message="A single PD must be the same for both eyes",
                    field="left_eye.pd",
                )
            )
        if record.add_prism:
            errors.extend(_check_prism(record.right_prism, "right_prism"))
            errors.extend(_check_prism(record.left_prism, "left_prism"))

    return errors


def check_eligibility(
    config: LensConfiguration,
    requires_lens_options: bool,
) -> list[ConfigError]:
    """
    Explain why a configuration cannot go to checkout yet.

    Returns list of errors (empty if checkout-eligible).
    """
    if not requires_lens_options:
        return []

    errors: list[ConfigError] = []

    if config.lens_type_id is None:
        errors.append(
            ConfigError(
                code="lens_type_required",
                message="Please choose a lens type",
                field="lens_type_id",
            )
        )

    if config.has_eyesight:
        prescription = config.prescription
        if prescription is None:
            errors.append(
                ConfigError(
                    code="prescription_type_required",
                    message="Please upload a prescription or enter it manually",
                    field="prescription_type",
                )
            )
        elif isinstance(prescription, UploadPrescription) and prescription.file is None:
            errors.append(
                ConfigError(
                    code="prescription_file_required",
                    message="Please upload your prescription",
                    field="prescription_image",
                )
            )
        elif isinstance(prescription, ManualPrescription):
            if not prescription.record.has_values():
                errors.append(
                    ConfigError(
                        code="prescription_values_required",
                        message="Please enter at least one prescription value",
                        field="prescription_data",
                    )
                )
            else:
                errors.extend(_check_pd_mode(prescription.record))

    return errors


def _check_pd_mode(record: PrescriptionRecord) -> list[ConfigError]:
    """
    PD values entered under the other PD mode are kept but block checkout.

    Switching modes never rewrites values, so the shopper re-selects them.
    """
    errors: list[ConfigError] = []
    options = pd_options(record.two_pd_numbers)
    mode = "two PD numbers" if record.two_pd_numbers else "a single PD"
    for prefix, eye in (("right_eye", record.right_eye), ("left_eye", record.left_eye)):
        if eye.pd and eye.pd not in options:
            errors.append(
                ConfigError(
                    code="pd_reselect_required",
                    message=f"Please re-select your PD: {eye.pd} does not fit {mode}",
                    field=f"{prefix}.pd",
                )
            )
    if not errors and not record.two_pd_numbers and record.right_eye.pd != record.left_eye.pd:
        errors.append(
            ConfigError(
                code="pd_reselect_required",
                message="Please re-select your PD: a single PD applies to both eyes",
                field="left_eye.pd",
            )
        )
    return errors


def is_checkout_eligible(config: LensConfiguration, requires_lens_options: bool) -> bool:
    return not check_eligibility(config, requires_lens_options)


# --- Snapshot ---


def initial_state() -> BuilderState:
    """State of a freshly mounted product page."""
    return BuilderState()


def snapshot(state: BuilderState) -> LensConfiguration:
    """Freeze the state into the configuration the rest of the system sees."""
    if not state.has_eyesight:
        return LensConfiguration(has_eyesight=False, lens_type_id=state.lens_type_id)

    prescription: UploadPrescription | ManualPrescription | None = None
    if state.prescription_type == "upload":
        prescription = UploadPrescription(file=state.uploaded_file)
    elif state.prescription_type == "manual":
        prescription = ManualPrescription(
            record=PrescriptionRecord(
                right_eye=state.right_eye,
                left_eye=state.left_eye,
                two_pd_numbers=state.two_pd_numbers,
                add_prism=state.add_prism,
                right_prism=state.right_prism if state.add_prism else None,
                left_prism=state.left_prism if state.add_prism else None,
            )
        )

    return LensConfiguration(
        has_eyesight=True,
        lens_type_id=state.lens_type_id,
        prescription=prescription,
    )


def build_preview(data: bytes, content_type: str, prefix: str = "image/") -> str | None:
    """Data URL preview for image uploads; documents get none."""
    if not content_type.startswith(prefix):
        return None
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


# --- Reducers ---

Reduced = tuple[BuilderState, list[ConfigError]]


def _select_eyesight_mode(
    state: BuilderState, event: SelectEyesightMode, constraints: FileConstraints
) -> Reduced:
    return replace(state, has_eyesight=event.has_eyesight), []


def _select_lens_type(
    state: BuilderState, event: SelectLensType, constraints: FileConstraints
) -> Reduced:
    return replace(state, lens_type_id=event.lens_type_id), []


def _select_prescription_method(
    state: BuilderState, event: SelectPrescriptionMethod, constraints: FileConstraints
) -> Reduced:
    return replace(state, prescription_type=event.method), []


def _begin_upload(state: BuilderState, event: BeginUpload, constraints: FileConstraints) -> Reduced:
    errors = validate_prescription_file(event.content_type, event.size_bytes, constraints)
    if errors:
        return state, errors
    return replace(state, pending_upload=UploadToken()), []


def _complete_upload(
    state: BuilderState, event: CompleteUpload, constraints: FileConstraints
) -> Reduced:
    if state.pending_upload != event.token:
        logger.info("Discarding superseded prescription upload %s", event.token.id)
        return state, [
            ConfigError(
                code="upload_superseded",
                message="This upload was replaced by a later action",
                field="prescription_image",
            )
        ]

    errors = validate_prescription_file(event.file.content_type, event.file.size_bytes, constraints)
    if errors:
        return state, errors

    return (
        replace(state, uploaded_file=event.file, preview=event.preview, pending_upload=None),
        [],
    )


def _fail_upload(state: BuilderState, event: FailUpload, constraints: FileConstraints) -> Reduced:
    if state.pending_upload != event.token:
        return state, []
    return replace(state, pending_upload=None), [
        ConfigError(code="upload_failed", message=event.message, field="prescription_image")
    ]


def _remove_uploaded_image(
    state: BuilderState, event: RemoveUploadedImage, constraints: FileConstraints
) -> Reduced:
    return replace(state, uploaded_file=None, preview=None), []


def _set_eye_field(state: BuilderState, event: SetEyeField, constraints: FileConstraints) -> Reduced:
    field_name = f"{event.eye}_eye.{event.field}"
    if event.value:
        options = (
            pd_options(state.two_pd_numbers)
            if event.field == "pd"
            else EYE_FIELD_OPTIONS[event.field]
        )
        errors = _check_option(event.value, options, field_name)
        if errors:
            return state, errors

    if event.field == "pd" and not state.two_pd_numbers:
        return (
            replace(
                state,
                right_eye=replace(state.right_eye, pd=event.value),
                left_eye=replace(state.left_eye, pd=event.value),
            ),
            [],
        )

    attr = f"{event.eye}_eye"
    eye: EyeData = getattr(state, attr)
    return replace(state, **{attr: replace(eye, **{event.field: event.value})}), []


def _set_pd_mode(
    state: BuilderState, event: SetPupillaryDistanceMode, constraints: FileConstraints
) -> Reduced:
    # Prior PD values are kept as entered, not reconciled
    return replace(state, two_pd_numbers=event.dual), []


def _set_prism_field(
    state: BuilderState, event: SetPrismField, constraints: FileConstraints
) -> Reduced:
    errors = _check_option(
        event.value, PRISM_FIELD_OPTIONS[event.field], f"{event.eye}_prism.{event.field}"
    )
    if errors:
        return state, errors
    attr = f"{event.eye}_prism"
    prism: PrismData = getattr(state, attr)
    return replace(state, **{attr: replace(prism, **{event.field: event.value})}), []


def _toggle_prism(state: BuilderState, event: TogglePrism, constraints: FileConstraints) -> Reduced:
    return replace(state, add_prism=event.enabled), []


# --- Transition Tables ---

TRANSITIONS: dict[type, Callable[[BuilderState, Any, FileConstraints], Reduced]] = {
    SelectEyesightMode: _select_eyesight_mode,
    SelectLensType: _select_lens_type,
    SelectPrescriptionMethod: _select_prescription_method,
    BeginUpload: _begin_upload,
    CompleteUpload: _complete_upload,
    FailUpload: _fail_upload,
    RemoveUploadedImage: _remove_uploaded_image,
    SetEyeField: _set_eye_field,
    SetPupillaryDistanceMode: _set_pd_mode,
    SetPrismField: _set_prism_field,
    TogglePrism: _toggle_prism,
}

# Mode forced after a successful event: (has_eyesight, prescription_type)
IMPLIED_MODE: dict[type, tuple[bool | None, PrescriptionType | None]] = {
    SelectPrescriptionMethod: (True, None),
    CompleteUpload: (True, "upload"),
    SetEyeField: (True, "manual"),
}

# Events that invalidate an in-flight upload
SUPERSEDES_UPLOAD: dict[type, Callable[[Any], bool]] = {
    BeginUpload: lambda e: True,
    RemoveUploadedImage: lambda e: True,
    SetEyeField: lambda e: True,
    SelectPrescriptionMethod: lambda e: e.method == "manual",
    SelectEyesightMode: lambda e: not e.has_eyesight,
}


# --- Component Entry Points ---


def apply(
    state: BuilderState,
    event: BuilderEvent,
    *,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> Transition:
    """
    Apply one shopper action to the builder state.

    Args:
        state: Current builder state.
        event: The action.
        constraints: Upload constraints (defaults to jpeg/png/pdf up to 5 MiB).

    Returns:
        Transition with the new state and its snapshot. On rejection the
        original state is returned together with the errors.
    """
    reducer = TRANSITIONS.get(type(event))
    if reducer is None:
        raise ValueError(f"Unknown builder event: {type(event)}")

    supersede = SUPERSEDES_UPLOAD.get(type(event))
    base = state
    if supersede is not None and supersede(event) and state.pending_upload is not None:
        base = replace(state, pending_upload=None)

    new_state, errors = reducer(base, event, constraints)
    if errors:
        if new_state is base:
            new_state = state
        return Transition(
            state=new_state,
            configuration=snapshot(new_state),
            errors=errors,
            changed=new_state != state,
        )

    has_eyesight, prescription_type = IMPLIED_MODE.get(type(event), (None, None))
    if has_eyesight is not None:
        new_state = replace(new_state, has_eyesight=has_eyesight)
    if prescription_type is not None:
        new_state = replace(new_state, prescription_type=prescription_type)

    return Transition(
        state=new_state,
        configuration=snapshot(new_state),
        errors=[],
        changed=new_state != state,
    )


def run(
    events: list[BuilderEvent],
    state: BuilderState | None = None,
    *,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> Transition:
    """
    Replay a sequence of events from an initial (or given) state.

    Rejected events are skipped; the returned Transition carries every error
    collected along the way.
    """
    current = state or initial_state()
    errors: list[ConfigError] = []
    for event in events:
        step = apply(current, event, constraints=constraints)
        errors.extend(step.errors)
        current = step.state
    return Transition(
        state=current,
        configuration=snapshot(current),
        errors=errors,
        changed=current != (state or initial_state()),
    )
