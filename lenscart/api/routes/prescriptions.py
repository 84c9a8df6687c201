"""
Prescription upload route.

The returned file reference goes into the lens configuration the shopper
submits with their cart line.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from lenscart.api.deps import get_cart_owner, get_file_store, get_upload_constraints
from lenscart.api.schemas import PrescriptionUploadResponse, error_details
from lenscart.components.cart import CartOwner
from lenscart.components.lens_config import FileConstraints
from lenscart.components.prescriptions import StoragePort, UploadPrescriptionInput, run_upload
from lenscart.domain.entities import PrescriptionFileRecord

router = APIRouter()

_STATUS_BY_CODE = {
    "file_too_large": 413,
    "persistence_failed": 503,
}


@router.post("", response_model=PrescriptionUploadResponse, status_code=201)
def upload_prescription(
    file: UploadFile = File(...),
    owner: CartOwner = Depends(get_cart_owner),
    storage: StoragePort = Depends(get_file_store),
    constraints: FileConstraints = Depends(get_upload_constraints),
) -> PrescriptionUploadResponse:
    """Store a prescription image or PDF."""
    # One byte past the limit is enough to reject an oversize file
    content = file.file.read(constraints.max_upload_bytes + 1)
    result = run_upload(
        UploadPrescriptionInput(
            data=content,
            filename=file.filename or "prescription",
            content_type=file.content_type or "application/octet-stream",
            owner_key=owner.key,
        ),
        storage=storage,
        constraints=constraints,
    )

    if not result.success or result.file is None:
        status_code = _STATUS_BY_CODE.get(result.errors[0].code, 400)
        raise HTTPException(status_code=status_code, detail=error_details(result.errors))

    ref = result.file
    return PrescriptionUploadResponse(
        file=PrescriptionFileRecord(
            storage_key=ref.storage_key,
            filename=ref.filename,
            content_type=ref.content_type,
            size_bytes=ref.size_bytes,
            sha256=ref.sha256,
        ),
        preview=result.preview,
    )
