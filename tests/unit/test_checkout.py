"""
Checkout component tests.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from lenscart.components.cart import AddToCartInput, CartOwner, run_add
from lenscart.components.checkout import (
    CheckoutSettings,
    PlaceOrderInput,
    generate_order_number,
    run_place_order,
    validate_checkout,
)
from lenscart.components.lens_config import (
    EyeData,
    LensConfiguration,
    ManualPrescription,
    PrescriptionRecord,
)
from lenscart.domain.entities import CartItem, LensRecord

USER_ID = uuid4()

ADDRESS = {
    "full_name": " Ayesha Khan ",
    "phone": "03001234567",
    "address_line1": "12 Mall Road",
    "address_line2": "",
    "city": "Lahore",
}


@pytest.fixture
def filled_cart(cart_repo, catalog, product):
    config = LensConfiguration(
        has_eyesight=True,
        lens_type_id=catalog.lens_type_by_name("Photochromic").id,
        prescription=ManualPrescription(
            record=PrescriptionRecord(
                right_eye=EyeData(sph="-1.25", cyl="-0.50", axis="90", pd="63"),
                left_eye=EyeData(sph="-1.00", pd="63"),
            )
        ),
    )
    result = run_add(
        AddToCartInput(
            owner=CartOwner(user_id=USER_ID),
            product_id=product.id,
            variant_id=catalog.variant_by_sku("AV-BLK-M").id,
            configuration=config,
            quantity=2,
        ),
        repo=cart_repo,
        catalog=catalog,
    )
    assert result.success
    return cart_repo


def place(cart_repo, order_repo, catalog, clock, **overrides):
    fields = {
        "user_id": USER_ID,
        "shipping_address": ADDRESS,
        "payment_method": "cod",
    }
    fields.update(overrides)
    return run_place_order(
        PlaceOrderInput(**fields),
        cart_repo=cart_repo,
        order_repo=order_repo,
        catalog=catalog,
        clock=clock,
    )


class TestOrderNumber:
    def test_format(self) -> None:
        number = generate_order_number("TE", datetime(2026, 1, 15, tzinfo=UTC))
        assert number.startswith("TE20260115-")
        assert len(number) == len("TE20260115-0000")
        assert number[-4:].isdigit()


class TestValidateCheckout:
    def test_missing_fields(self) -> None:
        inp = PlaceOrderInput(
            user_id=USER_ID,
            shipping_address={"full_name": "A", "phone": " "},
            payment_method="bitcoin",
        )
        fields = [e.field for e in validate_checkout(inp, CheckoutSettings())]
        assert fields == [
            "shipping_address.phone",
            "shipping_address.address_line1",
            "shipping_address.city",
            "payment_method",
        ]


class TestPlaceOrder:
    def test_order_snapshot(self, filled_cart, order_repo, catalog, clock) -> None:
        cart_line = filled_cart.list_items(CartOwner(user_id=USER_ID))[0]

        result = place(filled_cart, order_repo, catalog, clock, customer_notes="  Call first ")

        assert result.success
        assert result.cart_cleared
        order = result.order
        assert order is not None
        assert order.order_number.startswith("TE20260115-")
        assert order.subtotal == Decimal("14400")
        assert order.shipping_cost == Decimal("0")
        assert order.total == Decimal("14400")
        assert order.status == "pending"
        assert order.customer_notes == "Call first"
        assert order.shipping_address.full_name == "Ayesha Khan"
        assert order.shipping_address.address_line2 is None
        assert order.created_at == clock.now_utc()

        [item] = order.items
        assert item.unit_price == Decimal("7200")
        assert item.total_price == Decimal("14400")
        assert item.lens == cart_line.lens
        assert order_repo.get_order(order.id) == order

    def test_cart_cleared(self, filled_cart, order_repo, catalog, clock) -> None:
        place(filled_cart, order_repo, catalog, clock)
        assert filled_cart.list_items(CartOwner(user_id=USER_ID)) == []

    def test_prices_frozen_after_catalog_change(self, filled_cart, order_repo, catalog, clock, product) -> None:
        result = place(filled_cart, order_repo, catalog, clock)
        catalog.save_product(product.model_copy(update={"base_price": Decimal("9999")}))
        assert result.order is not None
        assert order_repo.get_order(result.order.id).items[0].unit_price == Decimal("7200")

    def test_flat_shipping_for_small_orders(self, cart_repo, order_repo, catalog, clock, frame_only) -> None:
        run_add(
            AddToCartInput(owner=CartOwner(user_id=USER_ID), product_id=frame_only.id),
            repo=cart_repo,
            catalog=catalog,
        )
        result = place(cart_repo, order_repo, catalog, clock)
        assert result.order is not None
        assert result.order.shipping_cost == Decimal("200")
        assert result.order.total == Decimal("1000")

    def test_empty_cart(self, cart_repo, order_repo, catalog, clock) -> None:
        result = place(cart_repo, order_repo, catalog, clock)
        assert result.errors[0].code == "cart_empty"
        assert order_repo.orders == {}

    def test_invalid_input_does_not_touch_cart(self, filled_cart, order_repo, catalog, clock) -> None:
        result = place(filled_cart, order_repo, catalog, clock, payment_method="barter")
        assert result.errors[0].code == "invalid_payment_method"
        assert len(filled_cart.items) == 1

    def test_save_failure_keeps_cart(self, filled_cart, order_repo, catalog, clock) -> None:
        order_repo.fail_writes = True
        result = place(filled_cart, order_repo, catalog, clock)
        assert result.errors[0].code == "persistence_failed"
        assert len(filled_cart.items) == 1

    def test_clear_failure_still_returns_order(self, filled_cart, order_repo, catalog, clock) -> None:
        filled_cart.fail_writes = True
        result = place(filled_cart, order_repo, catalog, clock)
        assert result.success
        assert result.order is not None
        assert result.cart_cleared is False

    def test_order_number_collision_retries(self, filled_cart, order_repo, catalog, clock, monkeypatch) -> None:
        numbers = iter(["TE20260115-0001", "TE20260115-0001", "TE20260115-0002"])
        monkeypatch.setattr(
            "lenscart.components.checkout.component.generate_order_number",
            lambda prefix, now: next(numbers),
        )
        first = place(filled_cart, order_repo, catalog, clock)
        assert first.order is not None
        assert first.order.order_number == "TE20260115-0001"

        run_add(
            AddToCartInput(
                owner=CartOwner(user_id=USER_ID),
                product_id=first.order.items[0].product_id,
                configuration=LensConfiguration(lens_type_id=catalog.lens_type_by_name("Standard").id),
            ),
            repo=filled_cart,
            catalog=catalog,
        )
        second = place(filled_cart, order_repo, catalog, clock)
        assert second.order is not None
        assert second.order.order_number == "TE20260115-0002"


class TestLineRecheck:
    def test_disabled_lens_type_blocks_order(self, filled_cart, order_repo, catalog, clock) -> None:
        lens_type = catalog.lens_type_by_name("Photochromic")
        catalog.save_lens_type(lens_type.model_copy(update={"is_enabled": False}))

        result = place(filled_cart, order_repo, catalog, clock)

        assert not result.success
        assert [e.code for e in result.errors] == ["lens_type_unavailable"]
        assert result.errors[0].field.startswith("items.")
        assert order_repo.orders == {}
        assert len(filled_cart.items) == 1

    def test_inactive_product_blocks_order(self, filled_cart, order_repo, catalog, clock, product) -> None:
        catalog.save_product(product.model_copy(update={"is_active": False}))
        result = place(filled_cart, order_repo, catalog, clock)
        assert [e.code for e in result.errors] == ["item_unavailable"]
        assert order_repo.orders == {}

    def test_sold_out_variant_blocks_order(self, filled_cart, order_repo, catalog, clock) -> None:
        black = catalog.variant_by_sku("AV-BLK-M")
        catalog.save_variant(black.model_copy(update={"stock": 0}))
        result = place(filled_cart, order_repo, catalog, clock)
        assert [e.code for e in result.errors] == ["out_of_stock"]
        assert len(filled_cart.items) == 1

    def test_lens_type_from_another_product(self, cart_repo, order_repo, catalog, clock, frame_only) -> None:
        photochromic = catalog.lens_type_by_name("Photochromic")
        cart_repo.save_item(
            CartItem(
                user_id=USER_ID,
                product_id=frame_only.id,
                lens=LensRecord(lens_type_id=photochromic.id),
            )
        )
        result = place(cart_repo, order_repo, catalog, clock)
        assert [e.code for e in result.errors] == ["lens_type_unavailable"]

    def test_ineligible_lens_blocks_order(self, cart_repo, order_repo, catalog, clock, product) -> None:
        cart_repo.save_item(CartItem(user_id=USER_ID, product_id=product.id, lens=LensRecord()))
        result = place(cart_repo, order_repo, catalog, clock)
        assert [e.code for e in result.errors] == ["lens_type_required"]
        assert order_repo.orders == {}
