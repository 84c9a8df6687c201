"""Admin routes for managing lens types."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from lenscart.api.deps import get_catalog_repo, require_admin
from lenscart.api.schemas import (
    LensTypeListResponse,
    LensTypeRequest,
    LensTypeResponse,
    error_details,
)
from lenscart.components.catalog import (
    CatalogRepoPort,
    LensTypeOutput,
    SaveLensTypeInput,
    run_list_lens_types,
    run_save_lens_type,
)
from lenscart.domain.entities import User

router = APIRouter()

_STATUS_BY_CODE = {
    "product_not_found": 404,
    "lens_type_not_found": 404,
    "persistence_failed": 503,
}


def _to_response(result: LensTypeOutput) -> LensTypeResponse:
    if not result.success or result.lens_type is None:
        status_code = _STATUS_BY_CODE.get(result.errors[0].code, 400)
        raise HTTPException(status_code=status_code, detail=error_details(result.errors))
    return LensTypeResponse.model_validate(result.lens_type.model_dump())


@router.get("/products/{product_id}/lens-types", response_model=LensTypeListResponse)
def list_lens_types(
    product_id: UUID,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> LensTypeListResponse:
    """All lens types of a product, disabled ones included."""
    result = run_list_lens_types(product_id, repo=repo, include_disabled=True)
    return LensTypeListResponse(
        items=[LensTypeResponse.model_validate(lt.model_dump()) for lt in result.lens_types],
        total=result.total,
    )


@router.post("/products/{product_id}/lens-types", response_model=LensTypeResponse, status_code=201)
def create_lens_type(
    product_id: UUID,
    data: LensTypeRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> LensTypeResponse:
    result = run_save_lens_type(
        SaveLensTypeInput(product_id=product_id, **data.model_dump()),
        repo=repo,
    )
    return _to_response(result)


@router.put("/lens-types/{lens_type_id}", response_model=LensTypeResponse)
def update_lens_type(
    lens_type_id: UUID,
    data: LensTypeRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> LensTypeResponse:
    existing = repo.get_lens_type(lens_type_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Lens type not found")

    result = run_save_lens_type(
        SaveLensTypeInput(product_id=existing.product_id, lens_type_id=lens_type_id, **data.model_dump()),
        repo=repo,
    )
    return _to_response(result)
