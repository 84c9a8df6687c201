"""
Cart routes. Guests are identified by the cart session header.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from lenscart.api.deps import (
    get_cart_owner,
    get_cart_repo,
    get_catalog_repo,
    get_checkout_settings,
    get_rules,
    get_upload_constraints,
)
from lenscart.api.schemas import (
    CartItemRequest,
    CartItemResponse,
    CartQuantityRequest,
    CartResponse,
    error_details,
)
from lenscart.components.cart import (
    AddToCartInput,
    CartError,
    CartOwner,
    CartRepoPort,
    RemoveItemInput,
    UpdateQuantityInput,
    run_add,
    run_list,
    run_remove,
    run_update_quantity,
)
from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.checkout import CheckoutSettings
from lenscart.components.lens_config import FileConstraints
from lenscart.components.pricing import ShippingPolicy, compute_order_totals
from lenscart.components.serialization import from_record
from lenscart.domain.entities import CartItem
from lenscart.rules.models import Rules

router = APIRouter()


def raise_for_errors(errors: list[CartError]) -> None:
    codes = {e.code for e in errors}
    if "persistence_failed" in codes:
        status_code = 503
    elif codes & {"item_not_found", "product_not_found"}:
        status_code = 404
    else:
        status_code = 400
    raise HTTPException(status_code=status_code, detail=error_details(errors))


def _item_response(item: CartItem) -> CartItemResponse:
    return CartItemResponse(
        id=item.id,
        product_id=item.product_id,
        variant_id=item.variant_id,
        quantity=item.quantity,
        lens=item.lens,
        created_at=item.created_at,
    )


@router.get("/items", response_model=CartResponse)
def list_cart(
    owner: CartOwner = Depends(get_cart_owner),
    repo: CartRepoPort = Depends(get_cart_repo),
    catalog: CatalogRepoPort = Depends(get_catalog_repo),
    checkout_settings: CheckoutSettings = Depends(get_checkout_settings),
) -> CartResponse:
    """Cart lines with current prices and the order totals they add up to."""
    result = run_list(owner, repo=repo, catalog=catalog)
    totals = compute_order_totals(
        (line.line_total for line in result.lines),
        ShippingPolicy(checkout_settings.free_shipping_threshold, checkout_settings.flat_fee),
    )
    return CartResponse(
        items=[
            _item_response(line.item).model_copy(
                update={
                    "product_title": line.product.title,
                    "lens_type_name": line.lens_type.name if line.lens_type else None,
                    "unit_price": line.unit_price,
                    "line_total": line.line_total,
                }
            )
            for line in result.lines
        ],
        count=result.count,
        subtotal=totals.subtotal,
        shipping_cost=totals.shipping_cost,
        total=totals.total,
    )


@router.post("/items", response_model=CartItemResponse, status_code=201)
def add_item(
    data: CartItemRequest,
    owner: CartOwner = Depends(get_cart_owner),
    repo: CartRepoPort = Depends(get_cart_repo),
    catalog: CatalogRepoPort = Depends(get_catalog_repo),
    constraints: FileConstraints = Depends(get_upload_constraints),
    rules: Rules = Depends(get_rules),
) -> CartItemResponse:
    """Add a product with its lens configuration."""
    result = run_add(
        AddToCartInput(
            owner=owner,
            product_id=data.product_id,
            variant_id=data.variant_id,
            quantity=data.quantity,
            configuration=from_record(data.lens),
        ),
        repo=repo,
        catalog=catalog,
        constraints=constraints,
        max_quantity=rules.cart.max_quantity_per_line,
    )
    if not result.success or result.item is None:
        raise_for_errors(result.errors)
    assert result.item is not None
    return _item_response(result.item)


@router.patch("/items/{item_id}", response_model=CartItemResponse)
def update_item(
    item_id: UUID,
    data: CartQuantityRequest,
    owner: CartOwner = Depends(get_cart_owner),
    repo: CartRepoPort = Depends(get_cart_repo),
    rules: Rules = Depends(get_rules),
) -> CartItemResponse:
    result = run_update_quantity(
        UpdateQuantityInput(owner=owner, item_id=item_id, quantity=data.quantity),
        repo=repo,
        max_quantity=rules.cart.max_quantity_per_line,
    )
    if not result.success or result.item is None:
        raise_for_errors(result.errors)
    assert result.item is not None
    return _item_response(result.item)


@router.delete("/items/{item_id}", status_code=204)
def remove_item(
    item_id: UUID,
    owner: CartOwner = Depends(get_cart_owner),
    repo: CartRepoPort = Depends(get_cart_repo),
) -> None:
    result = run_remove(RemoveItemInput(owner=owner, item_id=item_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
