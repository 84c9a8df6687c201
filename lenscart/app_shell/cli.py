import argparse
import logging
import sys
from decimal import Decimal

from lenscart.adapters.sqlite.migrator import SQLiteMigrator
from lenscart.adapters.sqlite.repos import SQLiteCatalogRepo, SQLiteOrderRepo
from lenscart.api.deps import Settings
from lenscart.components.catalog import CatalogRepoPort
from lenscart.components.orders import OrderRepoPort, build_line_details
from lenscart.components.pricing import format_price
from lenscart.components.serialization import format_fulfillment_sheet
from lenscart.domain.entities import LensType, Product, ProductVariant

logger = logging.getLogger("cli")

DEMO_SLUG = "classic-aviator"


def seed_catalog(repo: CatalogRepoPort) -> Product:
    """Demo storefront data: one frame with variants and three lens types."""
    existing = repo.get_product_by_slug(DEMO_SLUG)
    if existing is not None:
        logger.info("Demo product %s already present", DEMO_SLUG)
        return existing

    product = repo.save_product(
        Product(
            slug=DEMO_SLUG,
            title="Classic Aviator",
            description="Metal aviator frame, fits most faces.",
            base_price=Decimal("4500"),
            has_lens_options=True,
        )
    )
    for sku, color, adjustment, stock in (
        ("AV-GLD-M", "Gold", Decimal("0"), 12),
        ("AV-BLK-M", "Black", Decimal("200"), 3),
        ("AV-SLV-M", "Silver", Decimal("200"), 0),
    ):
        repo.save_variant(
            ProductVariant(
                product_id=product.id,
                sku=sku,
                color=color,
                size="Medium",
                material="Metal",
                price_adjustment=adjustment,
                stock=stock,
            )
        )
    for order, (name, adjustment) in enumerate(
        (("Standard", Decimal("0")), ("Blue Light Filter", Decimal("1500")), ("Photochromic", Decimal("2500")))
    ):
        repo.save_lens_type(
            LensType(product_id=product.id, name=name, price_adjustment=adjustment, display_order=order)
        )
    logger.info("Seeded demo product %s", DEMO_SLUG)
    return product


def render_order_sheet(order_number: str, orders: OrderRepoPort, catalog: CatalogRepoPort) -> str | None:
    order = orders.get_by_number(order_number)
    if order is None:
        return None

    address = order.shipping_address
    lines = [
        f"Order {order.order_number}  [{order.status}]",
        f"Placed:   {order.created_at:%Y-%m-%d %H:%M} UTC",
        f"Ship to:  {address.full_name}, {address.phone}",
        f"          {address.address_line1}, {address.city}",
        f"Payment:  {order.payment_method}",
        f"Total:    {format_price(order.total)} (shipping {format_price(order.shipping_cost)})",
    ]
    if order.customer_notes:
        lines.append(f"Notes:    {order.customer_notes}")

    for n, detail in enumerate(build_line_details(order, catalog), start=1):
        title = detail.product_title or "(deleted product)"
        if detail.variant_label:
            title += f" - {detail.variant_label}"
        lines.append("")
        lines.append(f"#{n} {title} x{detail.item.quantity}  {format_price(detail.item.total_price)}")
        lines.append(format_fulfillment_sheet(detail.fulfillment))
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="LensCart CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("seed", help="Load the demo catalog")

    sheet_parser = subparsers.add_parser("order-sheet", help="Print the fulfillment sheet of an order")
    sheet_parser.add_argument("order_number", help="Order number, e.g. TE20260115-0042")

    args = parser.parse_args(argv)
    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    if args.command == "migrate":
        applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
        print(f"Applied {len(applied)} migration(s) to {settings.db_path}")
    elif args.command == "seed":
        product = seed_catalog(SQLiteCatalogRepo(settings.db_path))
        print(f"Demo product: /api/products/{product.slug}")
    elif args.command == "order-sheet":
        sheet = render_order_sheet(
            args.order_number,
            SQLiteOrderRepo(settings.db_path),
            SQLiteCatalogRepo(settings.db_path),
        )
        if sheet is None:
            logger.error("Order %s not found.", args.order_number)
            return 1
        print(sheet)
    return 0


if __name__ == "__main__":
    sys.exit(main())
