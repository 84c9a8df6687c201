"""
Admin order routes: review, status updates, prescription files.
"""

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from lenscart.api.deps import (
    get_catalog_repo,
    get_file_store,
    get_order_repo,
    get_rules,
    require_admin,
)
from lenscart.api.schemas import (
    OrderDetailResponse,
    OrderItemResponse,
    OrderLineResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    OrderUpdateRequest,
    error_details,
    fulfillment_response,
    order_response,
)
from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.orders import (
    OrderRepoPort,
    UpdateOrderInput,
    find_item,
    run_list_orders,
    run_order_detail,
    run_update_order,
)
from lenscart.components.prescriptions import FetchPrescriptionInput, StoragePort, run_fetch
from lenscart.domain.entities import User
from lenscart.rules.models import Rules

router = APIRouter()


def build_content_disposition(filename: str) -> str:
    """
    Inline Content-Disposition for a shopper-supplied filename.

    The plain filename is an ASCII fallback with quotes and control characters
    replaced; filename* carries the original name percent-encoded (RFC 5987).
    """
    fallback = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in '"\\' else "_" for ch in filename
    ) or "prescription"
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("", response_model=OrderListResponse)
def list_orders(
    admin: User = Depends(require_admin),
    repo: OrderRepoPort = Depends(get_order_repo),
) -> OrderListResponse:
    """All orders, newest first."""
    result = run_list_orders(repo=repo)
    return OrderListResponse(
        items=[OrderSummaryResponse(**o.summary()) for o in result.orders],
        total=result.total,
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order_detail(
    order_id: UUID,
    admin: User = Depends(require_admin),
    repo: OrderRepoPort = Depends(get_order_repo),
    catalog: CatalogRepoPort = Depends(get_catalog_repo),
) -> OrderDetailResponse:
    """Order with the lens configuration of every line laid out for fulfillment."""
    result = run_order_detail(order_id, repo=repo, catalog=catalog)
    if not result.success or result.order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderDetailResponse(
        order=order_response(result.order),
        lines=[
            OrderLineResponse(
                item=OrderItemResponse.model_validate(line.item.model_dump()),
                product_title=line.product_title,
                variant_label=line.variant_label,
                fulfillment=fulfillment_response(line.fulfillment),
            )
            for line in result.lines
        ],
    )


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: UUID,
    data: OrderUpdateRequest,
    admin: User = Depends(require_admin),
    repo: OrderRepoPort = Depends(get_order_repo),
    rules: Rules = Depends(get_rules),
) -> OrderResponse:
    result = run_update_order(
        UpdateOrderInput(order_id=order_id, status=data.status, tracking_number=data.tracking_number),
        repo=repo,
        statuses=rules.orders.statuses,
    )
    if not result.success or result.order is None:
        code = result.errors[0].code
        status_code = {"order_not_found": 404, "persistence_failed": 503}.get(code, 400)
        raise HTTPException(status_code=status_code, detail=error_details(result.errors))
    return order_response(result.order)


@router.get("/{order_id}/items/{item_id}/prescription")
def get_prescription_file(
    order_id: UUID,
    item_id: UUID,
    admin: User = Depends(require_admin),
    repo: OrderRepoPort = Depends(get_order_repo),
    storage: StoragePort = Depends(get_file_store),
) -> Response:
    """Serve the uploaded prescription of one order line."""
    order = repo.get_order(order_id)
    item = find_item(order, item_id) if order else None
    if item is None or item.lens.prescription_file is None:
        raise HTTPException(status_code=404, detail="Prescription file not found")

    ref = item.lens.prescription_file
    result = run_fetch(FetchPrescriptionInput(storage_key=ref.storage_key), storage=storage)
    if not result.success or result.data is None:
        raise HTTPException(status_code=404, detail="Prescription file not found")

    return Response(
        content=result.data,
        media_type=ref.content_type,
        headers={
            "Content-Disposition": build_content_disposition(ref.filename),
            "Cache-Control": "private, no-store",
        },
    )
