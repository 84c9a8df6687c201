"""
Prescriptions component - durable storage for uploaded prescriptions.
"""

from .component import (
    constraints_from_rules,
    generate_storage_key,
    mime_to_extension,
    run_fetch,
    run_upload,
    upload_into_builder,
)
from .models import (
    FetchPrescriptionInput,
    FetchPrescriptionOutput,
    UploadPrescriptionInput,
    UploadPrescriptionOutput,
)
from .ports import (
    IntegrityError,
    KeyExistsError,
    StorageError,
    StoragePort,
    StoredObject,
)

__all__ = [
    # Entry points
    "run_upload",
    "run_fetch",
    "upload_into_builder",
    # Helpers
    "constraints_from_rules",
    "generate_storage_key",
    "mime_to_extension",
    # Models
    "UploadPrescriptionInput",
    "UploadPrescriptionOutput",
    "FetchPrescriptionInput",
    "FetchPrescriptionOutput",
    # Ports
    "StoragePort",
    "StoredObject",
    "StorageError",
    "KeyExistsError",
    "IntegrityError",
]
