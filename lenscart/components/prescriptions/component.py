"""
Prescriptions component - durable storage for uploaded prescriptions.

Files live under prescriptions/{owner_key}/ so that storage policies can scope
access by owner. Stored keys are what cart and order lines reference.

Invariants:
- I1: only jpeg/png/pdf up to the configured size are stored
- I2: the returned reference carries the sha256 of the stored bytes
- I3: keys are never reused
"""

from __future__ import annotations

import hashlib
import logging
import re
from typing import BinaryIO
from uuid import uuid4

from lenscart.components.lens_config import (
    DEFAULT_FILE_CONSTRAINTS,
    BeginUpload,
    BuilderState,
    CompleteUpload,
    ConfigError,
    FailUpload,
    FileConstraints,
    PrescriptionFileRef,
    Transition,
    apply,
    build_preview,
    validate_prescription_file,
)
from lenscart.rules.models import PrescriptionUploadRules

from .models import (
    FetchPrescriptionInput,
    FetchPrescriptionOutput,
    UploadPrescriptionInput,
    UploadPrescriptionOutput,
)
from .ports import StorageError, StoragePort

logger = logging.getLogger(__name__)

_OWNER_KEY_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


# --- Helper Functions ---


def constraints_from_rules(rules: PrescriptionUploadRules | None) -> FileConstraints:
    """Build upload constraints from rules or defaults."""
    if rules is None:
        return DEFAULT_FILE_CONSTRAINTS
    return FileConstraints(
        allowed_mime_types=tuple(rules.allowed_mime_types),
        max_upload_bytes=rules.max_upload_bytes,
        preview_mime_prefix=rules.preview_mime_prefix,
    )


def mime_to_extension(mime_type: str) -> str:
    """Get file extension from MIME type."""
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "application/pdf": "pdf",
    }
    return mapping.get(mime_type, "bin")


def generate_storage_key(owner_key: str, file_id: str, extension: str) -> str:
    """
    Generate storage key for a prescription.

    Format: prescriptions/{owner_key}/{file_id}.{ext}
    """
    return f"prescriptions/{owner_key}/{file_id}.{extension}"


def _read_bytes(data: bytes | BinaryIO) -> bytes:
    if isinstance(data, bytes):
        return data
    content = data.read()
    if hasattr(data, "seek"):
        data.seek(0)
    return content


# --- Component Entry Points ---


def run_upload(
    inp: UploadPrescriptionInput,
    *,
    storage: StoragePort,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> UploadPrescriptionOutput:
    """
    Validate and store a prescription file.

    Args:
        inp: File bytes, name, MIME type and owner.
        storage: Object storage port.
        constraints: Accepted MIME types and size.

    Returns:
        UploadPrescriptionOutput with a durable file reference, or errors.
    """
    if not _OWNER_KEY_RE.match(inp.owner_key):
        return UploadPrescriptionOutput(
            errors=[
                ConfigError(
                    code="invalid_owner",
                    message="Uploads must belong to a signed-in user or cart session",
                    field="owner_key",
                )
            ],
            success=False,
        )

    data = _read_bytes(inp.data)
    errors = validate_prescription_file(inp.content_type, len(data), constraints)
    if errors:
        logger.info(
            "Rejected prescription upload %r (%s, %d bytes): %s",
            inp.filename,
            inp.content_type,
            len(data),
            errors[0].code,
        )
        return UploadPrescriptionOutput(errors=errors, success=False)

    sha256 = hashlib.sha256(data).hexdigest()
    key = generate_storage_key(inp.owner_key, uuid4().hex, mime_to_extension(inp.content_type))
    try:
        storage.put(key, data, inp.content_type, expected_sha256=sha256)
    except (OSError, StorageError):
        logger.exception("Prescription storage failed for %r at %s", inp.filename, key)
        return UploadPrescriptionOutput(
            errors=[
                ConfigError(
                    code="persistence_failed",
                    message="Upload failed, please try again",
                    field="prescription_image",
                )
            ],
            success=False,
        )
    logger.info("Stored prescription upload at %s (%d bytes)", key, len(data))

    file_ref = PrescriptionFileRef(
        storage_key=key,
        filename=inp.filename,
        content_type=inp.content_type,
        size_bytes=len(data),
        sha256=sha256,
    )
    return UploadPrescriptionOutput(
        file=file_ref,
        preview=build_preview(data, inp.content_type, constraints.preview_mime_prefix),
        errors=[],
        success=True,
    )


def run_fetch(inp: FetchPrescriptionInput, *, storage: StoragePort) -> FetchPrescriptionOutput:
    """Get a stored prescription's bytes for review."""
    if not inp.storage_key.startswith("prescriptions/"):
        return FetchPrescriptionOutput(
            errors=[
                ConfigError(
                    code="not_found",
                    message=f"Prescription {inp.storage_key} not found",
                    field="storage_key",
                )
            ],
            success=False,
        )

    data = storage.get(inp.storage_key)
    if data is None:
        return FetchPrescriptionOutput(
            errors=[
                ConfigError(
                    code="not_found",
                    message=f"Prescription {inp.storage_key} not found",
                    field="storage_key",
                )
            ],
            success=False,
        )
    return FetchPrescriptionOutput(data=data, errors=[], success=True)


def upload_into_builder(
    state: BuilderState,
    inp: UploadPrescriptionInput,
    *,
    storage: StoragePort,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
) -> Transition:
    """
    Run a whole upload against a builder state: begin, store, complete.

    A storage failure is reported through FailUpload so the builder drops
    its pending token and keeps everything else.
    """
    data = _read_bytes(inp.data)
    started = apply(
        state,
        BeginUpload(filename=inp.filename, content_type=inp.content_type, size_bytes=len(data)),
        constraints=constraints,
    )
    token = started.state.pending_upload
    if started.errors or token is None:
        return started

    result = run_upload(
        UploadPrescriptionInput(
            data=data,
            filename=inp.filename,
            content_type=inp.content_type,
            owner_key=inp.owner_key,
        ),
        storage=storage,
        constraints=constraints,
    )

    if not result.success or result.file is None:
        return apply(
            started.state,
            FailUpload(token=token, message=result.errors[0].message if result.errors else "Upload failed"),
            constraints=constraints,
        )

    return apply(
        started.state,
        CompleteUpload(token=token, file=result.file, preview=result.preview),
        constraints=constraints,
    )
