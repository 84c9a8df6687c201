"""
Catalog component - shop listing, product pages and catalog administration.

Lens types are read-only input to the configuration builder; only the admin
back-office writes them, along with products and their variants.

Invariants:
- I1: inactive products are not found and not listed
- I2: shoppers only see enabled lens types, ordered by display_order
- I3: lens types and variants never move between products
- I4: product slugs and variant SKUs are unique
"""

from __future__ import annotations

import logging
import re
import sqlite3
from decimal import Decimal
from uuid import UUID

from lenscart.domain.entities import LensType, Product, ProductVariant

from .models import (
    CatalogError,
    GetProductOutput,
    LensTypeListOutput,
    LensTypeOutput,
    ListProductsInput,
    ProductDetail,
    ProductListOutput,
    ProductOutput,
    SaveLensTypeInput,
    SaveProductInput,
    SaveVariantInput,
    StockStatus,
    VariantListOutput,
    VariantOutput,
)
from .ports import CatalogRepoPort

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5
MAX_LENS_TYPE_NAME = 100
MAX_TITLE = 200
MAX_SLUG = 100
MAX_SKU = 64

PERSISTENCE_FAILED = CatalogError(
    code="persistence_failed",
    message="Could not save your changes, please try again",
)

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def stock_status(variant: ProductVariant) -> StockStatus:
    """Stock badge for a variant."""
    if variant.stock <= 0:
        return "out_of_stock"
    if variant.stock <= LOW_STOCK_THRESHOLD:
        return "low_stock"
    return "in_stock"


def slugify(title: str) -> str:
    """'Classic Aviator 2' -> 'classic-aviator-2'."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def _ordered(lens_types: list[LensType]) -> list[LensType]:
    return sorted(lens_types, key=lambda lt: (lt.display_order, lt.name))


def _check_price(value: Decimal, field_name: str, allow_negative: bool = True) -> list[CatalogError]:
    exponent = value.as_tuple().exponent
    if not value.is_finite() or (isinstance(exponent, int) and exponent < -2):
        return [
            CatalogError(
                code="invalid_price",
                message="Price must have at most 2 decimal places",
                field=field_name,
            )
        ]
    if not allow_negative and value < 0:
        return [CatalogError(code="invalid_price", message="Price cannot be negative", field=field_name)]
    return []


def validate_lens_type(inp: SaveLensTypeInput) -> list[CatalogError]:
    errors: list[CatalogError] = []
    name = inp.name.strip()
    if not name:
        errors.append(CatalogError(code="name_required", message="Lens type name is required", field="name"))
    elif len(name) > MAX_LENS_TYPE_NAME:
        errors.append(
            CatalogError(
                code="name_too_long",
                message=f"Lens type name must be at most {MAX_LENS_TYPE_NAME} characters",
                field="name",
            )
        )

    errors.extend(_check_price(inp.price_adjustment, "price_adjustment"))

    if inp.display_order < 0:
        errors.append(
            CatalogError(
                code="invalid_display_order",
                message="Display order must be zero or greater",
                field="display_order",
            )
        )
    return errors


def validate_product(inp: SaveProductInput) -> list[CatalogError]:
    errors: list[CatalogError] = []
    title = inp.title.strip()
    if not title:
        errors.append(CatalogError(code="title_required", message="Product title is required", field="title"))
    elif len(title) > MAX_TITLE:
        errors.append(
            CatalogError(
                code="title_too_long",
                message=f"Product title must be at most {MAX_TITLE} characters",
                field="title",
            )
        )

    slug = inp.slug if inp.slug is not None else slugify(title)
    if title or inp.slug is not None:
        if not _SLUG_RE.match(slug):
            errors.append(
                CatalogError(
                    code="invalid_slug",
                    message="Slug may only contain lowercase letters, numbers and hyphens",
                    field="slug",
                )
            )
        elif len(slug) > MAX_SLUG:
            errors.append(
                CatalogError(
                    code="slug_too_long",
                    message=f"Slug must be at most {MAX_SLUG} characters",
                    field="slug",
                )
            )

    errors.extend(_check_price(inp.base_price, "base_price", allow_negative=False))
    return errors


def validate_variant(inp: SaveVariantInput) -> list[CatalogError]:
    errors: list[CatalogError] = []
    sku = inp.sku.strip()
    if not sku:
        errors.append(CatalogError(code="sku_required", message="SKU is required", field="sku"))
    elif len(sku) > MAX_SKU:
        errors.append(
            CatalogError(code="sku_too_long", message=f"SKU must be at most {MAX_SKU} characters", field="sku")
        )

    errors.extend(_check_price(inp.price_adjustment, "price_adjustment"))

    if isinstance(inp.stock, bool) or inp.stock < 0:
        errors.append(CatalogError(code="invalid_stock", message="Stock must be zero or greater", field="stock"))
    return errors


def _matches_variants(variants: list[ProductVariant], inp: ListProductsInput) -> bool:
    return any(
        (not inp.colors or v.color in inp.colors) and (not inp.sizes or v.size in inp.sizes)
        for v in variants
    )


# --- Component Entry Points ---


def run_list_products(inp: ListProductsInput, *, repo: CatalogRepoPort) -> ProductListOutput:
    """
    Shop listing: filter by price and variant attributes, then sort.

    Ties keep newest first.
    """
    products = [p for p in repo.list_products() if inp.include_inactive or p.is_active]
    if inp.min_price is not None:
        products = [p for p in products if p.base_price >= inp.min_price]
    if inp.max_price is not None:
        products = [p for p in products if p.base_price <= inp.max_price]
    if inp.colors or inp.sizes:
        products = [p for p in products if _matches_variants(repo.list_variants(p.id), inp)]

    products.sort(key=lambda p: p.created_at, reverse=True)
    if inp.sort == "price-asc":
        products.sort(key=lambda p: p.base_price)
    elif inp.sort == "price-desc":
        products.sort(key=lambda p: p.base_price, reverse=True)
    elif inp.sort == "name":
        products.sort(key=lambda p: p.title.lower())

    return ProductListOutput(products=products, total=len(products))


def run_get_product(slug: str, *, repo: CatalogRepoPort) -> GetProductOutput:
    """Load a product page by slug."""
    product = repo.get_product_by_slug(slug)
    if product is None or not product.is_active:
        return GetProductOutput(
            detail=None,
            errors=[CatalogError(code="product_not_found", message=f"Product {slug!r} not found")],
            success=False,
        )

    lens_types: list[LensType] = []
    if product.has_lens_options:
        lens_types = _ordered([lt for lt in repo.list_lens_types(product.id) if lt.is_enabled])

    return GetProductOutput(
        detail=ProductDetail(
            product=product,
            variants=repo.list_variants(product.id),
            lens_types=lens_types,
        )
    )


def run_save_product(inp: SaveProductInput, *, repo: CatalogRepoPort) -> ProductOutput:
    """Create or update a product."""
    errors = validate_product(inp)
    if errors:
        return ProductOutput(product=None, errors=errors, success=False)

    slug = inp.slug if inp.slug is not None else slugify(inp.title)
    holder = repo.get_product_by_slug(slug)
    if holder is not None and holder.id != inp.product_id:
        return ProductOutput(
            product=None,
            errors=[CatalogError(code="slug_taken", message=f"Slug {slug!r} is already in use", field="slug")],
            success=False,
        )

    fields = {
        "slug": slug,
        "title": inp.title.strip(),
        "description": inp.description,
        "base_price": Decimal(inp.base_price),
        "has_lens_options": inp.has_lens_options,
        "is_active": inp.is_active,
        "images": list(inp.images),
    }

    if inp.product_id is None:
        product = Product(**fields)
    else:
        existing = repo.get_product(inp.product_id)
        if existing is None:
            return ProductOutput(
                product=None,
                errors=[
                    CatalogError(
                        code="product_not_found",
                        message=f"Product {inp.product_id} not found",
                        field="product_id",
                    )
                ],
                success=False,
            )
        product = existing.model_copy(update=fields)

    try:
        saved = repo.save_product(product)
    except sqlite3.Error:
        logger.exception("Failed to save product %s", product.slug)
        return ProductOutput(product=None, errors=[PERSISTENCE_FAILED], success=False)

    logger.info("Saved product %s (%s, active=%s)", saved.id, saved.slug, saved.is_active)
    return ProductOutput(product=saved)


def run_list_variants(product_id: UUID, *, repo: CatalogRepoPort) -> VariantListOutput:
    variants = repo.list_variants(product_id)
    return VariantListOutput(variants=variants, total=len(variants))


def run_save_variant(inp: SaveVariantInput, *, repo: CatalogRepoPort) -> VariantOutput:
    """Create or update a variant, including its stock level."""
    if repo.get_product(inp.product_id) is None:
        return VariantOutput(
            variant=None,
            errors=[
                CatalogError(
                    code="product_not_found",
                    message=f"Product {inp.product_id} not found",
                    field="product_id",
                )
            ],
            success=False,
        )

    errors = validate_variant(inp)
    if errors:
        return VariantOutput(variant=None, errors=errors, success=False)

    sku = inp.sku.strip()
    holder = repo.get_variant_by_sku(sku)
    if holder is not None and holder.id != inp.variant_id:
        return VariantOutput(
            variant=None,
            errors=[CatalogError(code="sku_taken", message=f"SKU {sku!r} is already in use", field="sku")],
            success=False,
        )

    fields = {
        "product_id": inp.product_id,
        "sku": sku,
        "color": inp.color,
        "size": inp.size,
        "material": inp.material,
        "price_adjustment": Decimal(inp.price_adjustment),
        "stock": inp.stock,
        "images": list(inp.images),
    }

    if inp.variant_id is None:
        variant = ProductVariant(**fields)
    else:
        existing = repo.get_variant(inp.variant_id)
        if existing is None or existing.product_id != inp.product_id:
            return VariantOutput(
                variant=None,
                errors=[
                    CatalogError(
                        code="variant_not_found",
                        message=f"Variant {inp.variant_id} not found",
                        field="variant_id",
                    )
                ],
                success=False,
            )
        variant = existing.model_copy(update=fields)

    try:
        saved = repo.save_variant(variant)
    except sqlite3.Error:
        logger.exception("Failed to save variant %s", variant.sku)
        return VariantOutput(variant=None, errors=[PERSISTENCE_FAILED], success=False)

    logger.info("Saved variant %s (%s, stock %d)", saved.id, saved.sku, saved.stock)
    return VariantOutput(variant=saved)


def run_list_lens_types(
    product_id: UUID,
    *,
    repo: CatalogRepoPort,
    include_disabled: bool = False,
) -> LensTypeListOutput:
    """List a product's lens types in display order."""
    lens_types = repo.list_lens_types(product_id)
    if not include_disabled:
        lens_types = [lt for lt in lens_types if lt.is_enabled]
    lens_types = _ordered(lens_types)
    return LensTypeListOutput(lens_types=lens_types, total=len(lens_types))


def run_save_lens_type(inp: SaveLensTypeInput, *, repo: CatalogRepoPort) -> LensTypeOutput:
    """Create or update a lens type."""
    if repo.get_product(inp.product_id) is None:
        return LensTypeOutput(
            lens_type=None,
            errors=[
                CatalogError(
                    code="product_not_found",
                    message=f"Product {inp.product_id} not found",
                    field="product_id",
                )
            ],
            success=False,
        )

    errors = validate_lens_type(inp)
    if errors:
        return LensTypeOutput(lens_type=None, errors=errors, success=False)

    fields = {
        "product_id": inp.product_id,
        "name": inp.name.strip(),
        "description": inp.description,
        "image_url": inp.image_url,
        "price_adjustment": Decimal(inp.price_adjustment),
        "is_enabled": inp.is_enabled,
        "display_order": inp.display_order,
    }

    if inp.lens_type_id is None:
        lens_type = LensType(**fields)
    else:
        existing = repo.get_lens_type(inp.lens_type_id)
        if existing is None or existing.product_id != inp.product_id:
            return LensTypeOutput(
                lens_type=None,
                errors=[
                    CatalogError(
                        code="lens_type_not_found",
                        message=f"Lens type {inp.lens_type_id} not found",
                        field="lens_type_id",
                    )
                ],
                success=False,
            )
        lens_type = existing.model_copy(update=fields)

    try:
        saved = repo.save_lens_type(lens_type)
    except sqlite3.Error:
        logger.exception("Failed to save lens type %s for product %s", lens_type.name, lens_type.product_id)
        return LensTypeOutput(lens_type=None, errors=[PERSISTENCE_FAILED], success=False)

    logger.info("Saved lens type %s (%s) for product %s", saved.id, saved.name, saved.product_id)
    return LensTypeOutput(lens_type=saved)
