"""
Cart component - cart lines carrying a frozen lens configuration.

Invariants:
- I1: a line's lens configuration passed validation and the eligibility check
  when it was added, and is never edited afterwards
- I2: only the owning user or session can change a line
- I3: a failed write leaves the caller's configuration untouched
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.lens_config import (
    DEFAULT_FILE_CONSTRAINTS,
    FileConstraints,
    check_eligibility,
    validate_configuration,
)
from lenscart.components.pricing import quote_for_configuration
from lenscart.components.serialization import from_record, to_record
from lenscart.domain.entities import CartItem, Product

from .models import (
    AddToCartInput,
    CartError,
    CartItemOutput,
    CartLine,
    CartListOutput,
    CartOwner,
    RemoveItemInput,
    UpdateQuantityInput,
)
from .ports import CartRepoPort

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUANTITY = 20

PERSISTENCE_FAILED = CartError(
    code="persistence_failed",
    message="Could not save your cart, please try again",
)


def _fail(code: str, message: str, field: str | None = None) -> CartItemOutput:
    return CartItemOutput(item=None, errors=[CartError(code=code, message=message, field=field)], success=False)


def _check_quantity(quantity: int, max_quantity: int) -> CartItemOutput | None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        return _fail("invalid_quantity", "Quantity must be at least 1", "quantity")
    if quantity > max_quantity:
        return _fail("invalid_quantity", f"Quantity must be at most {max_quantity}", "quantity")
    return None


def _check_lens_type(
    product: Product, inp: AddToCartInput, catalog: CatalogRepoPort
) -> CartItemOutput | None:
    lens_type_id = inp.configuration.lens_type_id
    if lens_type_id is None:
        return None
    lens_type = catalog.get_lens_type(lens_type_id)
    if lens_type is None or lens_type.product_id != product.id or not lens_type.is_enabled:
        return _fail(
            "lens_type_not_found",
            "Selected lens type is not available for this product",
            "lens_type_id",
        )
    return None


# --- Component Entry Points ---


def run_add(
    inp: AddToCartInput,
    *,
    repo: CartRepoPort,
    catalog: CatalogRepoPort,
    constraints: FileConstraints = DEFAULT_FILE_CONSTRAINTS,
    max_quantity: int = DEFAULT_MAX_QUANTITY,
) -> CartItemOutput:
    """
    Add a product with its lens configuration to the cart.

    Each add creates a new line, even for an identical configuration.
    """
    bad_quantity = _check_quantity(inp.quantity, max_quantity)
    if bad_quantity:
        return bad_quantity

    product = catalog.get_product(inp.product_id)
    if product is None or not product.is_active:
        return _fail("product_not_found", f"Product {inp.product_id} not found", "product_id")

    if inp.variant_id is not None:
        variant = catalog.get_variant(inp.variant_id)
        if variant is None or variant.product_id != product.id:
            return _fail("variant_not_found", "Selected variant does not belong to this product", "variant_id")
        if variant.stock <= 0:
            return _fail("out_of_stock", "Selected variant is out of stock", "variant_id")

    bad_lens_type = _check_lens_type(product, inp, catalog)
    if bad_lens_type:
        return bad_lens_type

    config = inp.configuration
    config_errors = validate_configuration(config, constraints) or check_eligibility(
        config, product.has_lens_options
    )
    if config_errors:
        return CartItemOutput(
            item=None,
            errors=[CartError(code=e.code, message=e.message, field=e.field) for e in config_errors],
            success=False,
        )

    file_ref = config.prescription_image
    if file_ref is not None and not file_ref.storage_key.startswith(f"prescriptions/{inp.owner.key}/"):
        return _fail(
            "prescription_file_forbidden",
            "Prescription file was not uploaded by this cart's owner",
            "prescription_image",
        )

    item = CartItem(
        user_id=inp.owner.user_id,
        session_id=inp.owner.session_id,
        product_id=product.id,
        variant_id=inp.variant_id,
        quantity=inp.quantity,
        lens=to_record(config),
    )
    try:
        saved = repo.save_item(item)
    except sqlite3.Error:
        logger.exception("Failed to save cart line for product %s", product.id)
        return CartItemOutput(item=None, errors=[PERSISTENCE_FAILED], success=False)

    logger.info(
        "Added product %s to cart (qty %d, eyesight=%s, prescription=%s)",
        product.id,
        saved.quantity,
        config.has_eyesight,
        config.prescription_type or "none",
    )
    return CartItemOutput(item=saved)


def _owned_item(owner: CartOwner, item_id: UUID, repo: CartRepoPort) -> CartItem | None:
    item = repo.get_item(item_id)
    if item is None or not owner.owns(item):
        return None
    return item


def run_update_quantity(
    inp: UpdateQuantityInput,
    *,
    repo: CartRepoPort,
    max_quantity: int = DEFAULT_MAX_QUANTITY,
) -> CartItemOutput:
    """Change a line's quantity. The lens configuration is left as it is."""
    bad_quantity = _check_quantity(inp.quantity, max_quantity)
    if bad_quantity:
        return bad_quantity

    item = _owned_item(inp.owner, inp.item_id, repo)
    if item is None:
        return _fail("item_not_found", f"Cart item {inp.item_id} not found", "item_id")

    updated = item.model_copy(update={"quantity": inp.quantity, "updated_at": datetime.now(UTC)})
    try:
        saved = repo.save_item(updated)
    except sqlite3.Error:
        logger.exception("Failed to update cart line %s", item.id)
        return CartItemOutput(item=None, errors=[PERSISTENCE_FAILED], success=False)
    return CartItemOutput(item=saved)


def run_remove(inp: RemoveItemInput, *, repo: CartRepoPort) -> CartItemOutput:
    item = _owned_item(inp.owner, inp.item_id, repo)
    if item is None:
        return _fail("item_not_found", f"Cart item {inp.item_id} not found", "item_id")

    try:
        repo.delete_item(item.id)
    except sqlite3.Error:
        logger.exception("Failed to remove cart line %s", item.id)
        return CartItemOutput(item=None, errors=[PERSISTENCE_FAILED], success=False)
    return CartItemOutput(item=item)


def price_lines(items: list[CartItem], catalog: CatalogRepoPort) -> list[CartLine]:
    """
    Price cart lines against current catalog rows.

    Lines whose product has since been deleted are dropped.
    """
    lines: list[CartLine] = []
    for item in items:
        product = catalog.get_product(item.product_id)
        if product is None:
            logger.warning("Cart line %s refers to missing product %s", item.id, item.product_id)
            continue
        variant = catalog.get_variant(item.variant_id) if item.variant_id else None
        lens_type = catalog.get_lens_type(item.lens.lens_type_id) if item.lens.lens_type_id else None
        quote = quote_for_configuration(
            product,
            variant,
            [lens_type] if lens_type else [],
            from_record(item.lens),
            item.quantity,
        )
        lines.append(
            CartLine(
                item=item,
                product=product,
                variant=variant,
                lens_type=lens_type,
                unit_price=quote.unit_price,
                line_total=quote.line_total,
            )
        )
    return lines


def run_list(owner: CartOwner, *, repo: CartRepoPort, catalog: CatalogRepoPort) -> CartListOutput:
    """List an owner's cart with prices and the badge count."""
    lines = price_lines(repo.list_items(owner), catalog)
    return CartListOutput(
        lines=lines,
        count=sum(line.item.quantity for line in lines),
        subtotal=sum((line.line_total for line in lines), Decimal("0")),
    )
