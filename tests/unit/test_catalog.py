"""
Catalog component tests - product pages and lens type admin.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from lenscart.components.catalog import (
    ListProductsInput,
    SaveLensTypeInput,
    SaveProductInput,
    SaveVariantInput,
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
from lenscart.domain.entities import LensType, Product, ProductVariant


class TestGetProduct:
    def test_demo_product_page(self, catalog) -> None:
        result = run_get_product("classic-aviator", repo=catalog)

        assert result.success
        assert result.detail is not None
        assert result.detail.product.base_price == Decimal("4500")
        assert len(result.detail.variants) == 3
        assert [lt.name for lt in result.detail.lens_types] == [
            "Standard",
            "Blue Light Filter",
            "Photochromic",
        ]

    def test_disabled_lens_types_hidden(self, catalog, product) -> None:
        lens = catalog.lens_type_by_name("Blue Light Filter")
        catalog.save_lens_type(lens.model_copy(update={"is_enabled": False}))

        result = run_get_product("classic-aviator", repo=catalog)
        assert result.detail is not None
        assert "Blue Light Filter" not in [lt.name for lt in result.detail.lens_types]

    def test_frame_only_product_has_no_lens_types(self, catalog, frame_only) -> None:
        catalog.save_lens_type(LensType(product_id=frame_only.id, name="Stray"))
        result = run_get_product("glasses-case", repo=catalog)
        assert result.detail is not None
        assert result.detail.lens_types == []

    def test_unknown_slug(self, catalog) -> None:
        result = run_get_product("nope", repo=catalog)
        assert not result.success
        assert result.errors[0].code == "product_not_found"

    def test_inactive_product_not_found(self, catalog) -> None:
        catalog.save_product(
            Product(slug="retired", title="Retired", base_price=Decimal("100"), is_active=False)
        )
        assert run_get_product("retired", repo=catalog).errors[0].code == "product_not_found"


class TestStockStatus:
    def test_badges(self, product) -> None:
        def variant(stock: int) -> ProductVariant:
            return ProductVariant(product_id=product.id, sku="X", stock=stock)

        assert stock_status(variant(0)) == "out_of_stock"
        assert stock_status(variant(-2)) == "out_of_stock"
        assert stock_status(variant(3)) == "low_stock"
        assert stock_status(variant(5)) == "low_stock"
        assert stock_status(variant(6)) == "in_stock"


class TestLensTypeAdmin:
    def test_create(self, catalog, product) -> None:
        result = run_save_lens_type(
            SaveLensTypeInput(
                product_id=product.id,
                name="  Polarized ",
                price_adjustment=Decimal("3000.00"),
                display_order=3,
            ),
            repo=catalog,
        )
        assert result.success
        assert result.lens_type is not None
        assert result.lens_type.name == "Polarized"
        assert catalog.get_lens_type(result.lens_type.id) is not None

    def test_update_keeps_id(self, catalog, product) -> None:
        lens = catalog.lens_type_by_name("Standard")
        result = run_save_lens_type(
            SaveLensTypeInput(
                product_id=product.id,
                name="Standard Clear",
                price_adjustment=Decimal("100"),
                lens_type_id=lens.id,
                is_enabled=False,
            ),
            repo=catalog,
        )
        assert result.lens_type is not None
        assert result.lens_type.id == lens.id
        assert catalog.get_lens_type(lens.id).name == "Standard Clear"

    def test_cannot_move_between_products(self, catalog, frame_only) -> None:
        lens = catalog.lens_type_by_name("Standard")
        result = run_save_lens_type(
            SaveLensTypeInput(product_id=frame_only.id, name="Moved", lens_type_id=lens.id),
            repo=catalog,
        )
        assert result.errors[0].code == "lens_type_not_found"

    def test_unknown_product(self, catalog) -> None:
        result = run_save_lens_type(SaveLensTypeInput(product_id=uuid4(), name="X"), repo=catalog)
        assert result.errors[0].code == "product_not_found"

    def test_validation(self, product) -> None:
        codes = [
            e.code
            for e in validate_lens_type(
                SaveLensTypeInput(
                    product_id=product.id,
                    name=" ",
                    price_adjustment=Decimal("1.005"),
                    display_order=-1,
                )
            )
        ]
        assert codes == ["name_required", "invalid_price", "invalid_display_order"]

    def test_name_too_long(self, product) -> None:
        errors = validate_lens_type(SaveLensTypeInput(product_id=product.id, name="x" * 101))
        assert errors[0].code == "name_too_long"

    def test_list_includes_disabled_for_admin(self, catalog, product) -> None:
        lens = catalog.lens_type_by_name("Photochromic")
        catalog.save_lens_type(lens.model_copy(update={"is_enabled": False}))

        assert run_list_lens_types(product.id, repo=catalog).total == 2
        everything = run_list_lens_types(product.id, repo=catalog, include_disabled=True)
        assert everything.total == 3
        assert everything.lens_types[-1].name == "Photochromic"

    def test_save_failure_is_reported(self, catalog, product) -> None:
        catalog.fail_writes = True
        result = run_save_lens_type(
            SaveLensTypeInput(product_id=product.id, name="Polarized"), repo=catalog
        )
        assert not result.success
        assert [e.code for e in result.errors] == ["persistence_failed"]


# --- Shop listing ---


@pytest.fixture
def shop(catalog, product):
    """Demo catalog plus an older reader frame and a retired sports frame."""
    reader = catalog.save_product(
        Product(
            slug="round-reader",
            title="Round Reader",
            base_price=Decimal("3000"),
            has_lens_options=True,
            created_at=datetime(2020, 1, 1, tzinfo=UTC),
        )
    )
    catalog.save_variant(
        ProductVariant(product_id=reader.id, sku="RR-TRT-S", color="Tortoise", size="Small", stock=4)
    )
    catalog.save_product(
        Product(
            slug="sport-wrap",
            title="Sport Wrap",
            base_price=Decimal("6000"),
            is_active=False,
            created_at=datetime(2021, 1, 1, tzinfo=UTC),
        )
    )
    return catalog


def slugs(inp: ListProductsInput, repo) -> list[str]:
    return [p.slug for p in run_list_products(inp, repo=repo).products]


class TestListProducts:
    def test_active_products_newest_first(self, shop) -> None:
        result = run_list_products(ListProductsInput(), repo=shop)
        assert [p.slug for p in result.products] == ["classic-aviator", "round-reader"]
        assert result.total == 2

    def test_admin_listing_includes_inactive(self, shop) -> None:
        assert "sport-wrap" in slugs(ListProductsInput(include_inactive=True), shop)

    def test_sorting(self, shop) -> None:
        assert slugs(ListProductsInput(sort="price-asc"), shop) == ["round-reader", "classic-aviator"]
        assert slugs(ListProductsInput(sort="price-desc"), shop) == ["classic-aviator", "round-reader"]
        assert slugs(ListProductsInput(sort="name"), shop) == ["classic-aviator", "round-reader"]

    def test_price_range(self, shop) -> None:
        assert slugs(ListProductsInput(min_price=Decimal("3500")), shop) == ["classic-aviator"]
        assert slugs(ListProductsInput(max_price=Decimal("3500")), shop) == ["round-reader"]
        assert slugs(ListProductsInput(min_price=Decimal("3000"), max_price=Decimal("4500")), shop) == [
            "classic-aviator",
            "round-reader",
        ]

    def test_variant_filters(self, shop) -> None:
        assert slugs(ListProductsInput(colors=("Tortoise",)), shop) == ["round-reader"]
        assert slugs(ListProductsInput(sizes=("Medium",)), shop) == ["classic-aviator"]
        assert slugs(ListProductsInput(colors=("Gold", "Tortoise"), sizes=("Small",)), shop) == [
            "round-reader"
        ]

    def test_color_and_size_must_match_one_variant(self, shop) -> None:
        assert slugs(ListProductsInput(colors=("Gold",), sizes=("Small",)), shop) == []


# --- Product admin ---


class TestProductAdmin:
    def test_slugify(self) -> None:
        assert slugify("Cat Eye  Deluxe!") == "cat-eye-deluxe"
        assert slugify("  --Retro 2--  ") == "retro-2"

    def test_create_derives_slug(self, catalog) -> None:
        result = run_save_product(
            SaveProductInput(title=" Cat Eye Deluxe ", base_price=Decimal("5200.00"), has_lens_options=True),
            repo=catalog,
        )
        assert result.success
        assert result.product is not None
        assert result.product.slug == "cat-eye-deluxe"
        assert result.product.title == "Cat Eye Deluxe"
        assert run_get_product("cat-eye-deluxe", repo=catalog).success

    def test_slug_must_be_unique(self, catalog, product) -> None:
        result = run_save_product(
            SaveProductInput(title="Classic Aviator", base_price=Decimal("100")), repo=catalog
        )
        assert [e.code for e in result.errors] == ["slug_taken"]

    def test_update_can_deactivate(self, catalog, product) -> None:
        result = run_save_product(
            SaveProductInput(
                product_id=product.id,
                title="Classic Aviator",
                slug="classic-aviator",
                base_price=Decimal("4700"),
                has_lens_options=True,
                is_active=False,
            ),
            repo=catalog,
        )
        assert result.product is not None
        assert result.product.id == product.id
        assert result.product.created_at == product.created_at
        assert catalog.get_product(product.id).base_price == Decimal("4700")
        assert run_get_product("classic-aviator", repo=catalog).errors[0].code == "product_not_found"

    def test_validation(self) -> None:
        codes = [e.code for e in validate_product(SaveProductInput(title=" ", base_price=Decimal("-1")))]
        assert codes == ["title_required", "invalid_price"]

        bad_slug = validate_product(SaveProductInput(title="Ok", slug="Bad Slug", base_price=Decimal("1")))
        assert [e.code for e in bad_slug] == ["invalid_slug"]

    def test_unknown_product(self, catalog) -> None:
        result = run_save_product(
            SaveProductInput(product_id=uuid4(), title="Ghost", base_price=Decimal("1")), repo=catalog
        )
        assert result.errors[0].code == "product_not_found"

    def test_save_failure_is_reported(self, catalog) -> None:
        catalog.fail_writes = True
        result = run_save_product(SaveProductInput(title="Ghost", base_price=Decimal("1")), repo=catalog)
        assert [e.code for e in result.errors] == ["persistence_failed"]


class TestVariantAdmin:
    def test_list(self, catalog, product) -> None:
        assert run_list_variants(product.id, repo=catalog).total == 3

    def test_create(self, catalog, product) -> None:
        result = run_save_variant(
            SaveVariantInput(
                product_id=product.id,
                sku=" AV-GUN-L ",
                color="Gunmetal",
                size="Large",
                price_adjustment=Decimal("350"),
                stock=10,
            ),
            repo=catalog,
        )
        assert result.success
        assert result.variant is not None
        assert result.variant.sku == "AV-GUN-L"
        assert run_list_variants(product.id, repo=catalog).total == 4

    def test_restock(self, catalog, product) -> None:
        silver = catalog.variant_by_sku("AV-SLV-M")
        result = run_save_variant(
            SaveVariantInput(
                product_id=product.id,
                sku="AV-SLV-M",
                color="Silver",
                size="Medium",
                material="Metal",
                price_adjustment=Decimal("200"),
                stock=4,
                variant_id=silver.id,
            ),
            repo=catalog,
        )
        assert result.variant is not None
        assert result.variant.id == silver.id
        assert stock_status(catalog.get_variant(silver.id)) == "low_stock"

    def test_sku_must_be_unique(self, catalog, product) -> None:
        result = run_save_variant(SaveVariantInput(product_id=product.id, sku="AV-GLD-M"), repo=catalog)
        assert [e.code for e in result.errors] == ["sku_taken"]

    def test_cannot_move_between_products(self, catalog, frame_only) -> None:
        silver = catalog.variant_by_sku("AV-SLV-M")
        result = run_save_variant(
            SaveVariantInput(product_id=frame_only.id, sku="AV-SLV-M", variant_id=silver.id),
            repo=catalog,
        )
        assert result.errors[0].code == "variant_not_found"

    def test_validation(self, product) -> None:
        codes = [
            e.code
            for e in validate_variant(
                SaveVariantInput(product_id=product.id, sku="", price_adjustment=Decimal("1.001"), stock=-1)
            )
        ]
        assert codes == ["sku_required", "invalid_price", "invalid_stock"]

    def test_unknown_product(self, catalog) -> None:
        result = run_save_variant(SaveVariantInput(product_id=uuid4(), sku="X-1"), repo=catalog)
        assert result.errors[0].code == "product_not_found"

    def test_save_failure_is_reported(self, catalog, product) -> None:
        catalog.fail_writes = True
        result = run_save_variant(SaveVariantInput(product_id=product.id, sku="AV-NEW"), repo=catalog)
        assert [e.code for e in result.errors] == ["persistence_failed"]
