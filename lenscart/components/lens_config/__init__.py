"""
Lens configuration component - prescription and lens-type builder.
"""

from .component import (
    ADD_OPTIONS,
    AXIS_OPTIONS,
    CYL_OPTIONS,
    DEFAULT_FILE_CONSTRAINTS,
    DUAL_PD_OPTIONS,
    HORIZONTAL_BASE_OPTIONS,
    IMPLIED_MODE,
    MAX_PRESCRIPTION_BYTES,
    PRISM_OPTIONS,
    SINGLE_PD_OPTIONS,
    SPH_OPTIONS,
    SUPERSEDES_UPLOAD,
    TRANSITIONS,
    VERTICAL_BASE_OPTIONS,
    apply,
    build_preview,
    check_eligibility,
    initial_state,
    is_checkout_eligible,
    pd_options,
    run,
    snapshot,
    validate_configuration,
    validate_prescription_file,
)
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
    Prescription,
    PrescriptionFileRef,
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

__all__ = [
    # Entry points
    "apply",
    "run",
    "initial_state",
    "snapshot",
    # Validation
    "check_eligibility",
    "is_checkout_eligible",
    "validate_configuration",
    "validate_prescription_file",
    "build_preview",
    "pd_options",
    # Tables and option lists
    "TRANSITIONS",
    "IMPLIED_MODE",
    "SUPERSEDES_UPLOAD",
    "SPH_OPTIONS",
    "CYL_OPTIONS",
    "AXIS_OPTIONS",
    "ADD_OPTIONS",
    "SINGLE_PD_OPTIONS",
    "DUAL_PD_OPTIONS",
    "PRISM_OPTIONS",
    "VERTICAL_BASE_OPTIONS",
    "HORIZONTAL_BASE_OPTIONS",
    "DEFAULT_FILE_CONSTRAINTS",
    "MAX_PRESCRIPTION_BYTES",
    # State and snapshot models
    "BuilderState",
    "LensConfiguration",
    "EyeData",
    "PrismData",
    "PrescriptionRecord",
    "PrescriptionFileRef",
    "PrescriptionType",
    "Prescription",
    "UploadPrescription",
    "ManualPrescription",
    "UploadToken",
    "FileConstraints",
    "ConfigError",
    "Transition",
    # Events
    "BuilderEvent",
    "SelectEyesightMode",
    "SelectLensType",
    "SelectPrescriptionMethod",
    "BeginUpload",
    "CompleteUpload",
    "FailUpload",
    "RemoveUploadedImage",
    "SetEyeField",
    "SetPupillaryDistanceMode",
    "SetPrismField",
    "TogglePrism",
]
