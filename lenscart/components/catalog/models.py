"""
Catalog component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal
from uuid import UUID

from lenscart.domain.entities import LensType, Product, ProductVariant

StockStatus = Literal["out_of_stock", "low_stock", "in_stock"]


@dataclass(frozen=True)
class CatalogError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ProductDetail:
    """Product page data: the product, its variants and selectable lens types."""

    product: Product
    variants: list[ProductVariant] = field(default_factory=list)
    lens_types: list[LensType] = field(default_factory=list)


@dataclass(frozen=True)
class GetProductOutput:
    detail: ProductDetail | None
    errors: list[CatalogError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SaveLensTypeInput:
    """Create a lens type, or update one when lens_type_id is given."""

    product_id: UUID
    name: str
    price_adjustment: Decimal = Decimal("0")
    description: str | None = None
    image_url: str | None = None
    is_enabled: bool = True
    display_order: int = 0
    lens_type_id: UUID | None = None


@dataclass(frozen=True)
class LensTypeOutput:
    lens_type: LensType | None
    errors: list[CatalogError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LensTypeListOutput:
    lens_types: list[LensType]
    total: int


# --- Shop listing ---

ProductSort = Literal["newest", "price-asc", "price-desc", "name"]


@dataclass(frozen=True)
class ListProductsInput:
    """
    Shop listing filters.

    colors and sizes match against variants; a product is listed when one of
    its variants has a wanted color and a wanted size.
    """

    sort: ProductSort = "newest"
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    colors: tuple[str, ...] = ()
    sizes: tuple[str, ...] = ()
    include_inactive: bool = False


@dataclass(frozen=True)
class ProductListOutput:
    products: list[Product]
    total: int


# --- Product and variant administration ---


@dataclass(frozen=True)
class SaveProductInput:
    """Create a product, or update one when product_id is given."""

    title: str
    base_price: Decimal
    slug: str | None = None  # derived from the title when omitted
    description: str | None = None
    has_lens_options: bool = False
    is_active: bool = True
    images: tuple[str, ...] = ()
    product_id: UUID | None = None


@dataclass(frozen=True)
class ProductOutput:
    product: Product | None
    errors: list[CatalogError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SaveVariantInput:
    """Create a variant, or update one when variant_id is given."""

    product_id: UUID
    sku: str
    price_adjustment: Decimal = Decimal("0")
    stock: int = 0
    color: str | None = None
    size: str | None = None
    material: str | None = None
    images: tuple[str, ...] = ()
    variant_id: UUID | None = None


@dataclass(frozen=True)
class VariantOutput:
    variant: ProductVariant | None
    errors: list[CatalogError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class VariantListOutput:
    variants: list[ProductVariant]
    total: int
