"""Checkout route: signed-in customers only."""

from fastapi import APIRouter, Depends, HTTPException

from lenscart.api.deps import (
    get_cart_repo,
    get_catalog_repo,
    get_checkout_settings,
    get_clock,
    get_current_user,
    get_order_repo,
)
from lenscart.api.schemas import CheckoutRequest, OrderResponse, error_details, order_response
from lenscart.components.cart import CartRepoPort
from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.checkout import (
    CheckoutSettings,
    ClockPort,
    PlaceOrderInput,
    run_place_order,
)
from lenscart.components.orders import OrderRepoPort
from lenscart.domain.entities import User

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
def place_order(
    data: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    cart_repo: CartRepoPort = Depends(get_cart_repo),
    order_repo: OrderRepoPort = Depends(get_order_repo),
    catalog: CatalogRepoPort = Depends(get_catalog_repo),
    clock: ClockPort = Depends(get_clock),
    settings: CheckoutSettings = Depends(get_checkout_settings),
) -> OrderResponse:
    """Place an order for the whole cart."""
    result = run_place_order(
        PlaceOrderInput(
            user_id=current_user.id,
            shipping_address=data.shipping_address,
            payment_method=data.payment_method,
            customer_notes=data.customer_notes,
        ),
        cart_repo=cart_repo,
        order_repo=order_repo,
        catalog=catalog,
        clock=clock,
        settings=settings,
    )

    if not result.success or result.order is None:
        status_code = 503 if result.errors[0].code == "persistence_failed" else 400
        raise HTTPException(status_code=status_code, detail=error_details(result.errors))

    return order_response(result.order)
