"""Admin routes for managing products and their variants."""

from typing import Any, NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from lenscart.api.deps import get_catalog_repo, require_admin
from lenscart.api.routes.products import product_summary, variant_response
from lenscart.api.schemas import (
    ProductListResponse,
    ProductRequest,
    ProductSummaryResponse,
    VariantListResponse,
    VariantRequest,
    VariantResponse,
    error_details,
)
from lenscart.components.catalog import (
    CatalogError,
    CatalogRepoPort,
    ListProductsInput,
    SaveProductInput,
    SaveVariantInput,
    run_list_products,
    run_list_variants,
    run_save_product,
    run_save_variant,
)
from lenscart.domain.entities import User

router = APIRouter()

_STATUS_BY_CODE = {
    "product_not_found": 404,
    "variant_not_found": 404,
    "persistence_failed": 503,
}


def raise_for_errors(errors: list[CatalogError]) -> NoReturn:
    status_code = _STATUS_BY_CODE.get(errors[0].code, 400)
    raise HTTPException(status_code=status_code, detail=error_details(errors))


def _product_input(data: ProductRequest, product_id: UUID | None = None) -> SaveProductInput:
    fields: dict[str, Any] = data.model_dump()
    fields["images"] = tuple(fields["images"])
    return SaveProductInput(product_id=product_id, **fields)


def _variant_input(data: VariantRequest, product_id: UUID, variant_id: UUID | None = None) -> SaveVariantInput:
    fields: dict[str, Any] = data.model_dump()
    fields["images"] = tuple(fields["images"])
    return SaveVariantInput(product_id=product_id, variant_id=variant_id, **fields)


# --- Products ---


@router.get("/products", response_model=ProductListResponse)
def list_products(
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> ProductListResponse:
    """All products, inactive ones included, newest first."""
    result = run_list_products(ListProductsInput(include_inactive=True), repo=repo)
    return ProductListResponse(items=[product_summary(p) for p in result.products], total=result.total)


@router.post("/products", response_model=ProductSummaryResponse, status_code=201)
def create_product(
    data: ProductRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> ProductSummaryResponse:
    result = run_save_product(_product_input(data), repo=repo)
    if not result.success or result.product is None:
        raise_for_errors(result.errors)
    return product_summary(result.product)


@router.put("/products/{product_id}", response_model=ProductSummaryResponse)
def update_product(
    product_id: UUID,
    data: ProductRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> ProductSummaryResponse:
    result = run_save_product(_product_input(data, product_id), repo=repo)
    if not result.success or result.product is None:
        raise_for_errors(result.errors)
    return product_summary(result.product)


# --- Variants ---


@router.get("/products/{product_id}/variants", response_model=VariantListResponse)
def list_variants(
    product_id: UUID,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> VariantListResponse:
    if repo.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    result = run_list_variants(product_id, repo=repo)
    return VariantListResponse(items=[variant_response(v) for v in result.variants], total=result.total)


@router.post("/products/{product_id}/variants", response_model=VariantResponse, status_code=201)
def create_variant(
    product_id: UUID,
    data: VariantRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> VariantResponse:
    result = run_save_variant(_variant_input(data, product_id), repo=repo)
    if not result.success or result.variant is None:
        raise_for_errors(result.errors)
    return variant_response(result.variant)


@router.put("/variants/{variant_id}", response_model=VariantResponse)
def update_variant(
    variant_id: UUID,
    data: VariantRequest,
    admin: User = Depends(require_admin),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> VariantResponse:
    """Edit a variant; this is where stock levels change."""
    existing = repo.get_variant(variant_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Variant not found")

    result = run_save_variant(_variant_input(data, existing.product_id, variant_id), repo=repo)
    if not result.success or result.variant is None:
        raise_for_errors(result.errors)
    return variant_response(result.variant)
