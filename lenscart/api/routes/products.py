"""
Storefront product routes: shop listing, product page data and live price quotes.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from lenscart.api.deps import get_catalog_repo
from lenscart.api.schemas import (
    LensTypeResponse,
    ProductListResponse,
    ProductResponse,
    ProductSummaryResponse,
    QuoteRequest,
    QuoteResponse,
    VariantResponse,
)
from lenscart.components.catalog import (
    CatalogRepoPort,
    ListProductsInput,
    ProductSort,
    run_get_product,
    run_list_products,
    stock_status,
)
from lenscart.components.pricing import format_price, quote_for_configuration
from lenscart.components.serialization import from_record
from lenscart.domain.entities import Product, ProductVariant

router = APIRouter()


def variant_response(variant: ProductVariant) -> VariantResponse:
    return VariantResponse(
        id=variant.id,
        sku=variant.sku,
        color=variant.color,
        size=variant.size,
        material=variant.material,
        price_adjustment=variant.price_adjustment,
        stock=variant.stock,
        stock_status=stock_status(variant),
        images=variant.images,
    )


def product_summary(product: Product) -> ProductSummaryResponse:
    return ProductSummaryResponse.model_validate(product.model_dump())


@router.get("", response_model=ProductListResponse)
def list_products(
    sort: ProductSort = Query("newest", description="newest, price-asc, price-desc or name"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    color: list[str] | None = Query(None, description="Variant colors, repeatable"),
    size: list[str] | None = Query(None, description="Variant sizes, repeatable"),
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> ProductListResponse:
    """Shop listing of active products."""
    result = run_list_products(
        ListProductsInput(
            sort=sort,
            min_price=min_price,
            max_price=max_price,
            colors=tuple(color or ()),
            sizes=tuple(size or ()),
        ),
        repo=repo,
    )
    return ProductListResponse(items=[product_summary(p) for p in result.products], total=result.total)


@router.get("/{slug}", response_model=ProductResponse)
def get_product(slug: str, repo: CatalogRepoPort = Depends(get_catalog_repo)) -> ProductResponse:
    """Product page: variants with stock badges and the enabled lens types."""
    result = run_get_product(slug, repo=repo)
    if not result.success or result.detail is None:
        raise HTTPException(status_code=404, detail="Product not found")

    detail = result.detail
    product = detail.product
    return ProductResponse(
        id=product.id,
        slug=product.slug,
        title=product.title,
        description=product.description,
        base_price=product.base_price,
        has_lens_options=product.has_lens_options,
        images=product.images,
        variants=[variant_response(v) for v in detail.variants],
        lens_types=[LensTypeResponse.model_validate(lt.model_dump()) for lt in detail.lens_types],
    )


@router.post("/{slug}/quote", response_model=QuoteResponse)
def quote(
    slug: str,
    data: QuoteRequest,
    repo: CatalogRepoPort = Depends(get_catalog_repo),
) -> QuoteResponse:
    """Price the current selection as the shopper edits it."""
    result = run_get_product(slug, repo=repo)
    if not result.success or result.detail is None:
        raise HTTPException(status_code=404, detail="Product not found")

    detail = result.detail
    variant = None
    if data.variant_id is not None:
        variant = next((v for v in detail.variants if v.id == data.variant_id), None)
        if variant is None:
            raise HTTPException(status_code=400, detail="Variant does not belong to this product")

    config = from_record(data.lens)
    if config.lens_type_id is not None and all(lt.id != config.lens_type_id for lt in detail.lens_types):
        raise HTTPException(status_code=400, detail="Lens type is not available for this product")

    price = quote_for_configuration(detail.product, variant, detail.lens_types, config, data.quantity)
    return QuoteResponse(
        unit_price=price.unit_price,
        line_total=price.line_total,
        quantity=price.quantity,
        display_total=format_price(price.line_total),
    )
