"""
Catalog component - shop listing, product pages and catalog administration.
"""

from .component import (
    LOW_STOCK_THRESHOLD,
    run_get_product,
    run_list_lens_types,
    run_list_products,
    run_list_variants,
    run_save_lens_type,
    run_save_product,
    run_save_variant,
    slugify,
    stock_status,
    validate_lens_type,
    validate_product,
    validate_variant,
)
from .models import (
    CatalogError,
    GetProductOutput,
    LensTypeListOutput,
    LensTypeOutput,
    ListProductsInput,
    ProductDetail,
    ProductListOutput,
    ProductOutput,
    ProductSort,
    SaveLensTypeInput,
    SaveProductInput,
    SaveVariantInput,
    StockStatus,
    VariantListOutput,
    VariantOutput,
)
from .ports import CatalogRepoPort

__all__ = [
    # Entry points
    "run_list_products",
    "run_get_product",
    "run_save_product",
    "run_list_variants",
    "run_save_variant",
    "run_list_lens_types",
    "run_save_lens_type",
    # Helpers
    "slugify",
    "stock_status",
    "validate_product",
    "validate_variant",
    "validate_lens_type",
    "LOW_STOCK_THRESHOLD",
    # Models
    "CatalogError",
    "ListProductsInput",
    "ProductListOutput",
    "ProductSort",
    "GetProductOutput",
    "ProductDetail",
    "SaveProductInput",
    "ProductOutput",
    "SaveVariantInput",
    "VariantOutput",
    "VariantListOutput",
    "SaveLensTypeInput",
    "LensTypeOutput",
    "LensTypeListOutput",
    "StockStatus",
    # Ports
    "CatalogRepoPort",
]
