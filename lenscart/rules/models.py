from decimal import Decimal

from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class PrescriptionUploadRules(BaseModel):
    allowed_mime_types: list[str]
    max_upload_bytes: int
    preview_mime_prefix: str = "image/"

class UploadsRules(BaseModel):
    prescriptions: PrescriptionUploadRules

class PricingRules(BaseModel):
    currency: str
    decimal_places: int = 2

class ShippingRules(BaseModel):
    free_shipping_threshold: Decimal
    flat_fee: Decimal

class OrderRules(BaseModel):
    number_prefix: str
    statuses: list[str]
    payment_methods: list[str]
    required_address_fields: list[str]

class CartRules(BaseModel):
    session_header: str = "X-Cart-Session"
    max_quantity_per_line: int = Field(default=20, ge=1)

class AuthRules(BaseModel):
    algorithm: str
    roles_claim: str
    admin_role: str

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]

class Rules(BaseModel):
    project: ProjectRules
    uploads: UploadsRules
    pricing: PricingRules
    shipping: ShippingRules
    orders: OrderRules
    cart: CartRules
    auth: AuthRules
    ops: OpsRules
