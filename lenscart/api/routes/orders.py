"""Customer order routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from lenscart.api.deps import get_current_user, get_order_repo
from lenscart.api.schemas import (
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    order_response,
)
from lenscart.components.orders import OrderRepoPort, run_get_order, run_list_orders
from lenscart.domain.entities import User

router = APIRouter()


@router.get("", response_model=OrderListResponse)
def list_my_orders(
    current_user: User = Depends(get_current_user),
    repo: OrderRepoPort = Depends(get_order_repo),
) -> OrderListResponse:
    """The signed-in customer's orders, newest first."""
    result = run_list_orders(repo=repo, user_id=current_user.id)
    return OrderListResponse(
        items=[OrderSummaryResponse(**o.summary()) for o in result.orders],
        total=result.total,
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: OrderRepoPort = Depends(get_order_repo),
) -> OrderResponse:
    """Order confirmation and history view."""
    result = run_get_order(order_id, current_user, repo=repo)
    if not result.success or result.order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_response(result.order)
