from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
PrescriptionType = Literal["upload", "manual"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["jazzcash", "easypaisa", "bank_transfer", "card", "cod"]
RoleType = Literal["admin", "customer"]


def _now() -> datetime:
    return datetime.now(UTC)


# --- Principal ---


class User(BaseModel):
    """Identity resolved from a platform-issued access token."""

    id: UUID
    email: str | None = None
    roles: list[RoleType] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles


# --- Catalog ---


class Product(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    slug: str
    title: str
    description: str | None = None
    base_price: Decimal
    has_lens_options: bool = False
    is_active: bool = True
    images: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)


class ProductVariant(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    product_id: UUID
    sku: str
    color: str | None = None
    size: str | None = None
    material: str | None = None
    price_adjustment: Decimal = Decimal("0")
    stock: int = 0
    images: list[str] = Field(default_factory=list)


class LensType(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    product_id: UUID
    name: str
    description: str | None = None
    image_url: str | None = None
    price_adjustment: Decimal = Decimal("0")
    is_enabled: bool = True
    display_order: int = 0


# --- Persisted lens configuration ---
# Wire keys follow the stored JSON blob (rightEye, twoPDNumbers, ...).


class EyeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sph: str = ""
    cyl: str = ""
    axis: str = ""
    add: str = ""
    pd: str = ""


class PrismRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vertical_prism: str = Field(default="0.00", alias="verticalPrism")
    vertical_base: str = Field(default="n/a", alias="verticalBase")
    horizontal_prism: str = Field(default="0.00", alias="horizontalPrism")
    horizontal_base: str = Field(default="n/a", alias="horizontalBase")


class PrescriptionDataRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    right_eye: EyeRecord = Field(default_factory=EyeRecord, alias="rightEye")
    left_eye: EyeRecord = Field(default_factory=EyeRecord, alias="leftEye")
    two_pd_numbers: bool = Field(default=False, alias="twoPDNumbers")
    add_prism: bool = Field(default=False, alias="addPrism")
    right_prism: PrismRecord | None = Field(default=None, alias="rightPrism")
    left_prism: PrismRecord | None = Field(default=None, alias="leftPrism")


class PrescriptionFileRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    storage_key: str
    filename: str
    content_type: str
    size_bytes: int
    sha256: str


class LensRecord(BaseModel):
    """
    Lens configuration as stored on a cart line and copied to an order line.

    Never mutated once attached to an order line.
    """

    model_config = ConfigDict(frozen=True)

    has_eyesight: bool = False
    lens_type_id: UUID | None = None
    prescription_type: PrescriptionType | None = None
    prescription_data: PrescriptionDataRecord | None = None
    prescription_file: PrescriptionFileRecord | None = None


# --- Cart ---


class CartItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID | None = None
    session_id: str | None = None
    product_id: UUID
    variant_id: UUID | None = None
    quantity: int = 1
    lens: LensRecord = Field(default_factory=LensRecord)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


# --- Orders ---


class ShippingAddress(BaseModel):
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str | None = None


class OrderItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    order_id: UUID
    product_id: UUID | None
    variant_id: UUID | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    lens: LensRecord = Field(default_factory=LensRecord)
    created_at: datetime = Field(default_factory=_now)


class Order(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID | None
    order_number: str
    subtotal: Decimal
    shipping_cost: Decimal = Decimal("0")
    total: Decimal
    status: OrderStatus = "pending"
    payment_method: PaymentMethod
    tracking_number: str | None = None
    shipping_address: ShippingAddress
    customer_notes: str | None = None
    items: list[OrderItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def summary(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "status": self.status,
            "total": str(self.total),
            "created_at": self.created_at.isoformat(),
        }
