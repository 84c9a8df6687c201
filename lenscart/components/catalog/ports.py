"""
Catalog component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from lenscart.domain.entities import LensType, Product, ProductVariant


class CatalogRepoPort(Protocol):
    """Repository interface for products, variants and lens types."""

    def get_product(self, product_id: UUID) -> Product | None:
        """Get product by ID."""
        ...

    def get_product_by_slug(self, slug: str) -> Product | None:
        """Get product by slug."""
        ...

    def list_products(self) -> list[Product]:
        """List every product, active or not."""
        ...

    def save_product(self, product: Product) -> Product:
        """Save or update product."""
        ...

    def list_variants(self, product_id: UUID) -> list[ProductVariant]:
        """List variants of a product."""
        ...

    def get_variant(self, variant_id: UUID) -> ProductVariant | None:
        """Get variant by ID."""
        ...

    def get_variant_by_sku(self, sku: str) -> ProductVariant | None:
        """Get variant by SKU."""
        ...

    def save_variant(self, variant: ProductVariant) -> ProductVariant:
        """Save or update variant."""
        ...

    def list_lens_types(self, product_id: UUID) -> list[LensType]:
        """List all lens types of a product, enabled or not."""
        ...

    def get_lens_type(self, lens_type_id: UUID) -> LensType | None:
        """Get lens type by ID."""
        ...

    def save_lens_type(self, lens_type: LensType) -> LensType:
        """Save or update lens type."""
        ...
