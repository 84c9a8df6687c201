from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from lenscart.domain.entities import LensRecord, PrescriptionFileRecord, ShippingAddress

# --- Shared Types ---
StockStatus = Literal["out_of_stock", "low_stock", "in_stock"]


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: str | None = None


def error_details(errors: list[Any]) -> list[dict[str, Any]]:
    return [{"code": e.code, "message": e.message, "field": e.field} for e in errors]


# --- Catalog ---
class VariantResponse(BaseModel):
    id: UUID
    sku: str
    color: str | None
    size: str | None
    material: str | None
    price_adjustment: Decimal
    stock: int
    stock_status: StockStatus
    images: list[str]


class LensTypeResponse(BaseModel):
    id: UUID
    product_id: UUID
    name: str
    description: str | None
    image_url: str | None
    price_adjustment: Decimal
    is_enabled: bool
    display_order: int


class ProductResponse(BaseModel):
    id: UUID
    slug: str
    title: str
    description: str | None
    base_price: Decimal
    has_lens_options: bool
    images: list[str]
    variants: list[VariantResponse]
    lens_types: list[LensTypeResponse]


class ProductSummaryResponse(BaseModel):
    id: UUID
    slug: str
    title: str
    description: str | None
    base_price: Decimal
    has_lens_options: bool
    is_active: bool
    images: list[str]
    created_at: datetime


class ProductListResponse(BaseModel):
    items: list[ProductSummaryResponse]
    total: int


class ProductRequest(BaseModel):
    title: str
    base_price: Decimal
    slug: str | None = None
    description: str | None = None
    has_lens_options: bool = False
    is_active: bool = True
    images: list[str] = Field(default_factory=list)


class VariantRequest(BaseModel):
    sku: str
    price_adjustment: Decimal = Decimal("0")
    stock: int = 0
    color: str | None = None
    size: str | None = None
    material: str | None = None
    images: list[str] = Field(default_factory=list)


class VariantListResponse(BaseModel):
    items: list[VariantResponse]
    total: int


class LensTypeRequest(BaseModel):
    name: str
    price_adjustment: Decimal = Decimal("0")
    description: str | None = None
    image_url: str | None = None
    is_enabled: bool = True
    display_order: int = 0


class LensTypeListResponse(BaseModel):
    items: list[LensTypeResponse]
    total: int


# --- Pricing ---
class QuoteRequest(BaseModel):
    variant_id: UUID | None = None
    quantity: int = Field(default=1, ge=1)
    lens: LensRecord = Field(default_factory=LensRecord)


class QuoteResponse(BaseModel):
    unit_price: Decimal
    line_total: Decimal
    quantity: int
    display_total: str


# --- Prescriptions ---
class PrescriptionUploadResponse(BaseModel):
    file: PrescriptionFileRecord
    preview: str | None = None


# --- Cart ---
class CartItemRequest(BaseModel):
    product_id: UUID
    variant_id: UUID | None = None
    quantity: int = 1
    lens: LensRecord = Field(default_factory=LensRecord)


class CartQuantityRequest(BaseModel):
    quantity: int


class CartItemResponse(BaseModel):
    id: UUID
    product_id: UUID
    product_title: str | None = None
    variant_id: UUID | None
    lens_type_name: str | None = None
    quantity: int
    lens: LensRecord
    unit_price: Decimal | None = None
    line_total: Decimal | None = None
    created_at: datetime


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    count: int
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal


# --- Orders ---
class CheckoutRequest(BaseModel):
    shipping_address: dict[str, str | None]
    payment_method: str
    customer_notes: str | None = None


class OrderItemResponse(BaseModel):
    id: UUID
    product_id: UUID | None
    variant_id: UUID | None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    lens: LensRecord


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    status: str
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    payment_method: str
    tracking_number: str | None
    shipping_address: ShippingAddress
    customer_notes: str | None
    items: list[OrderItemResponse]
    created_at: datetime
    updated_at: datetime


class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    status: str
    total: str
    created_at: str


class OrderListResponse(BaseModel):
    items: list[OrderSummaryResponse]
    total: int


class EyeRowResponse(BaseModel):
    label: str
    sph: str
    cyl: str
    axis: str
    add: str
    pd: str


class PrismRowResponse(BaseModel):
    label: str
    vertical_prism: str
    vertical_base: str
    horizontal_prism: str
    horizontal_base: str


class FulfillmentResponse(BaseModel):
    lens_option: str
    lens_type_id: UUID | None
    lens_type_name: str | None
    prescription_type: str | None
    file: PrescriptionFileRecord | None
    eye_rows: list[EyeRowResponse]
    two_pd_numbers: bool
    pd_display: str | None
    show_prism_table: bool
    prism_rows: list[PrismRowResponse]


class OrderLineResponse(BaseModel):
    item: OrderItemResponse
    product_title: str | None
    variant_label: str | None
    fulfillment: FulfillmentResponse


class OrderDetailResponse(BaseModel):
    order: OrderResponse
    lines: list[OrderLineResponse]


class OrderUpdateRequest(BaseModel):
    status: str | None = None
    tracking_number: str | None = None


# --- Converters ---
def order_response(order: Any) -> OrderResponse:
    return OrderResponse.model_validate(order.model_dump())


def fulfillment_response(view: Any) -> FulfillmentResponse:
    file = None
    if view.file is not None:
        file = PrescriptionFileRecord(
            storage_key=view.file.storage_key,
            filename=view.file.filename,
            content_type=view.file.content_type,
            size_bytes=view.file.size_bytes,
            sha256=view.file.sha256,
        )
    return FulfillmentResponse(
        lens_option=view.lens_option,
        lens_type_id=view.lens_type_id,
        lens_type_name=view.lens_type_name,
        prescription_type=view.prescription_type,
        file=file,
        eye_rows=[EyeRowResponse(**vars(row)) for row in view.eye_rows],
        two_pd_numbers=view.two_pd_numbers,
        pd_display=view.pd_display,
        show_prism_table=view.show_prism_table,
        prism_rows=[PrismRowResponse(**vars(row)) for row in view.prism_rows],
    )
