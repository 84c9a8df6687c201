"""
Lens configuration component models.

The builder keeps everything the shopper has entered in one BuilderState.
LensConfiguration is the immutable snapshot derived from it after every event.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Literal
from uuid import UUID, uuid4

PrescriptionType = Literal["upload", "manual"]
EyeName = Literal["right", "left"]
EyeField = Literal["sph", "cyl", "axis", "add", "pd"]
PrismField = Literal["vertical_prism", "vertical_base", "horizontal_prism", "horizontal_base"]


# --- Validation Error ---


@dataclass(frozen=True)
class ConfigError:
    """Configuration error with actionable message."""

    code: str
    message: str
    field: str = "configuration"


# --- Value Types ---


@dataclass(frozen=True)
class EyeData:
    """One eye of a manual prescription. Empty string means not entered."""

    sph: str = ""
    cyl: str = ""
    axis: str = ""
    add: str = ""
    pd: str = ""

    def has_values(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class PrismData:
    vertical_prism: str = "0.00"
    vertical_base: str = "n/a"
    horizontal_prism: str = "0.00"
    horizontal_base: str = "n/a"


@dataclass(frozen=True)
class PrescriptionRecord:
    """
    Manual prescription as emitted in a snapshot.

    right_prism/left_prism are None unless add_prism is set.
    """

    right_eye: EyeData = field(default_factory=EyeData)
    left_eye: EyeData = field(default_factory=EyeData)
    two_pd_numbers: bool = False
    add_prism: bool = False
    right_prism: PrismData | None = None
    left_prism: PrismData | None = None

    def has_values(self) -> bool:
        return self.right_eye.has_values() or self.left_eye.has_values()


@dataclass(frozen=True)
class PrescriptionFileRef:
    """Durable reference to an uploaded prescription in object storage."""

    storage_key: str
    filename: str
    content_type: str
    size_bytes: int
    sha256: str


@dataclass(frozen=True)
class UploadPrescription:
    file: PrescriptionFileRef | None = None
    kind: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ManualPrescription:
    record: PrescriptionRecord = field(default_factory=PrescriptionRecord)
    kind: Literal["manual"] = "manual"


Prescription = UploadPrescription | ManualPrescription


@dataclass(frozen=True)
class LensConfiguration:
    """
    Immutable lens configuration snapshot.

    Invariants:
    - prescription is None whenever has_eyesight is False
    - exactly one prescription branch exists, selected by its kind
    """

    has_eyesight: bool = False
    lens_type_id: UUID | None = None
    prescription: Prescription | None = None

    @property
    def prescription_type(self) -> PrescriptionType | None:
        return self.prescription.kind if self.prescription else None

    @property
    def prescription_image(self) -> PrescriptionFileRef | None:
        if isinstance(self.prescription, UploadPrescription):
            return self.prescription.file
        return None

    @property
    def prescription_data(self) -> PrescriptionRecord | None:
        if isinstance(self.prescription, ManualPrescription):
            return self.prescription.record
        return None


# --- Configuration Models ---


@dataclass(frozen=True)
class FileConstraints:
    """Accepted prescription upload types and size."""

    allowed_mime_types: tuple[str, ...]
    max_upload_bytes: int
    preview_mime_prefix: str = "image/"


# --- Builder State ---


@dataclass(frozen=True)
class UploadToken:
    """Identity of one in-flight upload."""

    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class BuilderState:
    """
    Everything the shopper has entered so far.

    Both prescription branches are retained so the shopper can switch input
    method without re-entering values. Only the active one reaches a snapshot.
    """

    has_eyesight: bool = False
    lens_type_id: UUID | None = None
    prescription_type: PrescriptionType | None = None
    uploaded_file: PrescriptionFileRef | None = None
    preview: str | None = None
    pending_upload: UploadToken | None = None
    right_eye: EyeData = field(default_factory=EyeData)
    left_eye: EyeData = field(default_factory=EyeData)
    two_pd_numbers: bool = False
    add_prism: bool = False
    right_prism: PrismData = field(default_factory=PrismData)
    left_prism: PrismData = field(default_factory=PrismData)

    @property
    def uploading(self) -> bool:
        return self.pending_upload is not None


# --- Events ---


@dataclass(frozen=True)
class SelectEyesightMode:
    has_eyesight: bool


@dataclass(frozen=True)
class SelectLensType:
    lens_type_id: UUID


@dataclass(frozen=True)
class SelectPrescriptionMethod:
    method: PrescriptionType


@dataclass(frozen=True)
class BeginUpload:
    """File picked; checked before any bytes are read or stored."""

    filename: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class CompleteUpload:
    token: UploadToken
    file: PrescriptionFileRef
    preview: str | None = None


@dataclass(frozen=True)
class FailUpload:
    token: UploadToken
    message: str = "Upload failed"


@dataclass(frozen=True)
class RemoveUploadedImage:
    pass


@dataclass(frozen=True)
class SetEyeField:
    eye: EyeName
    field: EyeField
    value: str


@dataclass(frozen=True)
class SetPupillaryDistanceMode:
    dual: bool


@dataclass(frozen=True)
class SetPrismField:
    eye: EyeName
    field: PrismField
    value: str


@dataclass(frozen=True)
class TogglePrism:
    enabled: bool


BuilderEvent = (
    SelectEyesightMode
    | SelectLensType
    | SelectPrescriptionMethod
    | BeginUpload
    | CompleteUpload
    | FailUpload
    | RemoveUploadedImage
    | SetEyeField
    | SetPupillaryDistanceMode
    | SetPrismField
    | TogglePrism
)


# --- Output Models ---


@dataclass(frozen=True)
class Transition:
    """Result of applying one event: the new state and its snapshot."""

    state: BuilderState
    configuration: LensConfiguration
    errors: list[ConfigError] = field(default_factory=list)
    changed: bool = False

    @property
    def success(self) -> bool:
        return not self.errors
