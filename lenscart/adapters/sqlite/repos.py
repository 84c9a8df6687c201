import json
import sqlite3
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from lenscart.components.cart import CartOwner
from lenscart.components.serialization import dumps_record, loads_record
from lenscart.domain.entities import (
    CartItem,
    LensType,
    Order,
    OrderItem,
    Product,
    ProductVariant,
    ShippingAddress,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _uuid(value: str | None) -> UUID | None:
    return UUID(value) if value else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteCatalogRepo(_SQLiteRepo):
    # --- Products ---

    def _row_to_product(self, row: dict[str, Any]) -> Product:
        return Product(
            id=UUID(row["id"]),
            slug=row["slug"],
            title=row["title"],
            description=row["description"],
            base_price=Decimal(row["base_price"]),
            has_lens_options=bool(row["has_lens_options"]),
            is_active=bool(row["is_active"]),
            images=json.loads(row["images_json"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def save_product(self, product: Product) -> Product:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO products (
                    id, slug, title, description, base_price,
                    has_lens_options, is_active, images_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    slug=excluded.slug,
                    title=excluded.title,
                    description=excluded.description,
                    base_price=excluded.base_price,
                    has_lens_options=excluded.has_lens_options,
                    is_active=excluded.is_active,
                    images_json=excluded.images_json
            """,
                (
                    str(product.id),
                    product.slug,
                    product.title,
                    product.description,
                    str(product.base_price),
                    1 if product.has_lens_options else 0,
                    1 if product.is_active else 0,
                    json.dumps(product.images),
                    product.created_at.isoformat(),
                ),
            )
            conn.commit()
            return product
        finally:
            conn.close()

    def get_product(self, product_id: UUID) -> Product | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM products WHERE id = ?", (str(product_id),)).fetchone()
            return self._row_to_product(row) if row else None
        finally:
            conn.close()

    def get_product_by_slug(self, slug: str) -> Product | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM products WHERE slug = ?", (slug,)).fetchone()
            return self._row_to_product(row) if row else None
        finally:
            conn.close()

    def list_products(self) -> list[Product]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM products ORDER BY created_at DESC").fetchall()
            return [self._row_to_product(r) for r in rows]
        finally:
            conn.close()

    # --- Variants ---

    def _row_to_variant(self, row: dict[str, Any]) -> ProductVariant:
        return ProductVariant(
            id=UUID(row["id"]),
            product_id=UUID(row["product_id"]),
            sku=row["sku"],
            color=row["color"],
            size=row["size"],
            material=row["material"],
            price_adjustment=Decimal(row["price_adjustment"]),
            stock=row["stock"],
            images=json.loads(row["images_json"]),
        )

    def save_variant(self, variant: ProductVariant) -> ProductVariant:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO product_variants (
                    id, product_id, sku, color, size, material,
                    price_adjustment, stock, images_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    sku=excluded.sku,
                    color=excluded.color,
                    size=excluded.size,
                    material=excluded.material,
                    price_adjustment=excluded.price_adjustment,
                    stock=excluded.stock,
                    images_json=excluded.images_json
            """,
                (
                    str(variant.id),
                    str(variant.product_id),
                    variant.sku,
                    variant.color,
                    variant.size,
                    variant.material,
                    str(variant.price_adjustment),
                    variant.stock,
                    json.dumps(variant.images),
                ),
            )
            conn.commit()
            return variant
        finally:
            conn.close()

    def get_variant(self, variant_id: UUID) -> ProductVariant | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM product_variants WHERE id = ?", (str(variant_id),)
            ).fetchone()
            return self._row_to_variant(row) if row else None
        finally:
            conn.close()

    def get_variant_by_sku(self, sku: str) -> ProductVariant | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM product_variants WHERE sku = ?", (sku,)).fetchone()
            return self._row_to_variant(row) if row else None
        finally:
            conn.close()

    def list_variants(self, product_id: UUID) -> list[ProductVariant]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM product_variants WHERE product_id = ? ORDER BY sku",
                (str(product_id),),
            ).fetchall()
            return [self._row_to_variant(r) for r in rows]
        finally:
            conn.close()

    # --- Lens types ---

    def _row_to_lens_type(self, row: dict[str, Any]) -> LensType:
        return LensType(
            id=UUID(row["id"]),
            product_id=UUID(row["product_id"]),
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
            price_adjustment=Decimal(row["price_adjustment"]),
            is_enabled=bool(row["is_enabled"]),
            display_order=row["display_order"],
        )

    def save_lens_type(self, lens_type: LensType) -> LensType:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO lens_types (
                    id, product_id, name, description, image_url,
                    price_adjustment, is_enabled, display_order
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    image_url=excluded.image_url,
                    price_adjustment=excluded.price_adjustment,
                    is_enabled=excluded.is_enabled,
                    display_order=excluded.display_order
            """,
                (
                    str(lens_type.id),
                    str(lens_type.product_id),
                    lens_type.name,
                    lens_type.description,
                    lens_type.image_url,
                    str(lens_type.price_adjustment),
                    1 if lens_type.is_enabled else 0,
                    lens_type.display_order,
                ),
            )
            conn.commit()
            return lens_type
        finally:
            conn.close()

    def get_lens_type(self, lens_type_id: UUID) -> LensType | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM lens_types WHERE id = ?", (str(lens_type_id),)
            ).fetchone()
            return self._row_to_lens_type(row) if row else None
        finally:
            conn.close()

    def list_lens_types(self, product_id: UUID) -> list[LensType]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM lens_types WHERE product_id = ? ORDER BY display_order, name",
                (str(product_id),),
            ).fetchall()
            return [self._row_to_lens_type(r) for r in rows]
        finally:
            conn.close()


class SQLiteCartRepo(_SQLiteRepo):
    def _row_to_item(self, row: dict[str, Any]) -> CartItem:
        return CartItem(
            id=UUID(row["id"]),
            user_id=_uuid(row["user_id"]),
            session_id=row["session_id"],
            product_id=UUID(row["product_id"]),
            variant_id=_uuid(row["variant_id"]),
            quantity=row["quantity"],
            lens=loads_record(row["lens_json"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _owner_clause(self, owner: CartOwner) -> tuple[str, str]:
        if owner.user_id is not None:
            return "user_id = ?", str(owner.user_id)
        return "user_id IS NULL AND session_id = ?", str(owner.session_id)

    def list_items(self, owner: CartOwner) -> list[CartItem]:
        clause, value = self._owner_clause(owner)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM cart_items WHERE {clause} ORDER BY created_at ASC, rowid",
                (value,),
            ).fetchall()
            return [self._row_to_item(r) for r in rows]
        finally:
            conn.close()

    def get_item(self, item_id: UUID) -> CartItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM cart_items WHERE id = ?", (str(item_id),)).fetchone()
            return self._row_to_item(row) if row else None
        finally:
            conn.close()

    def save_item(self, item: CartItem) -> CartItem:
        conn = self._get_conn()
        try:
            # Only quantity changes after insert; the lens record is frozen.
            conn.execute(
                """
                INSERT INTO cart_items (
                    id, user_id, session_id, product_id, variant_id,
                    quantity, lens_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    quantity=excluded.quantity,
                    updated_at=excluded.updated_at
            """,
                (
                    str(item.id),
                    str(item.user_id) if item.user_id else None,
                    item.session_id,
                    str(item.product_id),
                    str(item.variant_id) if item.variant_id else None,
                    item.quantity,
                    dumps_record(item.lens),
                    item.created_at.isoformat(),
                    item.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return item
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def delete_item(self, item_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM cart_items WHERE id = ?", (str(item_id),))
            conn.commit()
        finally:
            conn.close()

    def clear(self, owner: CartOwner) -> int:
        clause, value = self._owner_clause(owner)
        conn = self._get_conn()
        try:
            cursor = conn.execute(f"DELETE FROM cart_items WHERE {clause}", (value,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()


class SQLiteOrderRepo(_SQLiteRepo):
    def _row_to_item(self, row: dict[str, Any]) -> OrderItem:
        return OrderItem(
            id=UUID(row["id"]),
            order_id=UUID(row["order_id"]),
            product_id=_uuid(row["product_id"]),
            variant_id=_uuid(row["variant_id"]),
            quantity=row["quantity"],
            unit_price=Decimal(row["unit_price"]),
            total_price=Decimal(row["total_price"]),
            lens=loads_record(row["lens_json"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_order(self, row: dict[str, Any], items: list[OrderItem]) -> Order:
        return Order(
            id=UUID(row["id"]),
            user_id=_uuid(row["user_id"]),
            order_number=row["order_number"],
            subtotal=Decimal(row["subtotal"]),
            shipping_cost=Decimal(row["shipping_cost"]),
            total=Decimal(row["total"]),
            status=row["status"],
            payment_method=row["payment_method"],
            tracking_number=row["tracking_number"],
            shipping_address=ShippingAddress.model_validate_json(row["shipping_address_json"]),
            customer_notes=row["customer_notes"],
            items=items,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _load_items(self, conn: sqlite3.Connection, order_id: str) -> list[OrderItem]:
        rows = conn.execute(
            "SELECT * FROM order_items WHERE order_id = ? ORDER BY created_at, rowid",
            (order_id,),
        ).fetchall()
        return [self._row_to_item(r) for r in rows]

    def save_order(self, order: Order) -> Order:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO orders (
                    id, user_id, order_number, subtotal, shipping_cost, total,
                    status, payment_method, tracking_number, shipping_address_json,
                    customer_notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    str(order.id),
                    str(order.user_id) if order.user_id else None,
                    order.order_number,
                    str(order.subtotal),
                    str(order.shipping_cost),
                    str(order.total),
                    order.status,
                    order.payment_method,
                    order.tracking_number,
                    order.shipping_address.model_dump_json(),
                    order.customer_notes,
                    order.created_at.isoformat(),
                    order.updated_at.isoformat(),
                ),
            )

            for item in order.items:
                conn.execute(
                    """
                    INSERT INTO order_items (
                        id, order_id, product_id, variant_id, quantity,
                        unit_price, total_price, lens_json, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        str(item.id),
                        str(order.id),
                        str(item.product_id) if item.product_id else None,
                        str(item.variant_id) if item.variant_id else None,
                        item.quantity,
                        str(item.unit_price),
                        str(item.total_price),
                        dumps_record(item.lens),
                        item.created_at.isoformat(),
                    ),
                )

            conn.commit()
            return order
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update_order(self, order: Order) -> Order:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                UPDATE orders SET status = ?, tracking_number = ?, updated_at = ?
                WHERE id = ?
            """,
                (order.status, order.tracking_number, order.updated_at.isoformat(), str(order.id)),
            )
            conn.commit()
            return order
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_order(self, order_id: UUID) -> Order | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM orders WHERE id = ?", (str(order_id),)).fetchone()
            if not row:
                return None
            return self._row_to_order(row, self._load_items(conn, row["id"]))
        finally:
            conn.close()

    def get_by_number(self, order_number: str) -> Order | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM orders WHERE order_number = ?", (order_number,)
            ).fetchone()
            if not row:
                return None
            return self._row_to_order(row, self._load_items(conn, row["id"]))
        finally:
            conn.close()

    def order_number_exists(self, order_number: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 AS found FROM orders WHERE order_number = ?", (order_number,)
            ).fetchone()
            return row is not None
        finally:
            conn.close()

    def list_orders(self, user_id: UUID | None = None) -> list[Order]:
        conn = self._get_conn()
        try:
            if user_id is None:
                rows = conn.execute("SELECT * FROM orders ORDER BY created_at DESC").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM orders WHERE user_id = ? ORDER BY created_at DESC",
                    (str(user_id),),
                ).fetchall()
            return [self._row_to_order(r, self._load_items(conn, r["id"])) for r in rows]
        finally:
            conn.close()
