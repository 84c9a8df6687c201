import hashlib
import sqlite3
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest

from lenscart.adapters.clock import FixedClock
from lenscart.app_shell.cli import seed_catalog
from lenscart.components.cart import CartOwner
from lenscart.components.prescriptions import StoredObject
from lenscart.domain.entities import CartItem, LensType, Order, Product, ProductVariant

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# --- In-memory repositories ---


class InMemoryCatalogRepo:
    def __init__(self) -> None:
        self.products: dict[UUID, Product] = {}
        self.variants: dict[UUID, ProductVariant] = {}
        self.lens_types: dict[UUID, LensType] = {}
        self.fail_writes = False

    def _check(self) -> None:
        if self.fail_writes:
            raise sqlite3.OperationalError("database is locked")

    def list_products(self) -> list[Product]:
        return sorted(self.products.values(), key=lambda p: p.created_at, reverse=True)

    def get_product(self, product_id: UUID) -> Product | None:
        return self.products.get(product_id)

    def get_product_by_slug(self, slug: str) -> Product | None:
        return next((p for p in self.products.values() if p.slug == slug), None)

    def save_product(self, product: Product) -> Product:
        self._check()
        self.products[product.id] = product
        return product

    def list_variants(self, product_id: UUID) -> list[ProductVariant]:
        return sorted(
            (v for v in self.variants.values() if v.product_id == product_id), key=lambda v: v.sku
        )

    def get_variant(self, variant_id: UUID) -> ProductVariant | None:
        return self.variants.get(variant_id)

    def get_variant_by_sku(self, sku: str) -> ProductVariant | None:
        return next((v for v in self.variants.values() if v.sku == sku), None)

    def save_variant(self, variant: ProductVariant) -> ProductVariant:
        self._check()
        self.variants[variant.id] = variant
        return variant

    def list_lens_types(self, product_id: UUID) -> list[LensType]:
        return [lt for lt in self.lens_types.values() if lt.product_id == product_id]

    def get_lens_type(self, lens_type_id: UUID) -> LensType | None:
        return self.lens_types.get(lens_type_id)

    def save_lens_type(self, lens_type: LensType) -> LensType:
        self._check()
        self.lens_types[lens_type.id] = lens_type
        return lens_type

    # helpers for tests
    def variant_by_sku(self, sku: str) -> ProductVariant:
        return next(v for v in self.variants.values() if v.sku == sku)

    def lens_type_by_name(self, name: str) -> LensType:
        return next(lt for lt in self.lens_types.values() if lt.name == name)


class InMemoryCartRepo:
    def __init__(self) -> None:
        self.items: dict[UUID, CartItem] = {}
        self.fail_writes = False

    def _check(self) -> None:
        if self.fail_writes:
            raise sqlite3.OperationalError("database is locked")

    def list_items(self, owner: CartOwner) -> list[CartItem]:
        return sorted(
            (i for i in self.items.values() if owner.owns(i)), key=lambda i: i.created_at
        )

    def get_item(self, item_id: UUID) -> CartItem | None:
        return self.items.get(item_id)

    def save_item(self, item: CartItem) -> CartItem:
        self._check()
        self.items[item.id] = item
        return item

    def delete_item(self, item_id: UUID) -> None:
        self._check()
        self.items.pop(item_id, None)

    def clear(self, owner: CartOwner) -> int:
        self._check()
        doomed = [i.id for i in self.items.values() if owner.owns(i)]
        for item_id in doomed:
            del self.items[item_id]
        return len(doomed)


class InMemoryOrderRepo:
    def __init__(self) -> None:
        self.orders: dict[UUID, Order] = {}
        self.fail_writes = False

    def save_order(self, order: Order) -> Order:
        if self.fail_writes:
            raise sqlite3.OperationalError("disk I/O error")
        self.orders[order.id] = order
        return order

    def get_order(self, order_id: UUID) -> Order | None:
        return self.orders.get(order_id)

    def get_by_number(self, order_number: str) -> Order | None:
        return next((o for o in self.orders.values() if o.order_number == order_number), None)

    def order_number_exists(self, order_number: str) -> bool:
        return self.get_by_number(order_number) is not None

    def list_orders(self, user_id: UUID | None = None) -> list[Order]:
        return [o for o in self.orders.values() if user_id is None or o.user_id == user_id]

    def update_order(self, order: Order) -> Order:
        if self.fail_writes:
            raise sqlite3.OperationalError("disk I/O error")
        self.orders[order.id] = order
        return order


class InMemoryStore:
    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail_writes = False

    def put(self, key, data, content_type, *, expected_sha256=None) -> StoredObject:
        if self.fail_writes:
            raise OSError("No space left on device")
        self.objects[key] = (data, content_type)
        return StoredObject(
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            sha256=expected_sha256 or hashlib.sha256(data).hexdigest(),
        )

    def exists(self, key: str) -> bool:
        return key in self.objects

    def get(self, key: str) -> bytes | None:
        entry = self.objects.get(key)
        return entry[0] if entry else None


# --- Fixtures ---


@pytest.fixture
def catalog() -> InMemoryCatalogRepo:
    """Demo catalog: Classic Aviator at 4500, Black variant +200, Photochromic lens +2500."""
    repo = InMemoryCatalogRepo()
    seed_catalog(repo)
    return repo


@pytest.fixture
def product(catalog: InMemoryCatalogRepo) -> Product:
    found = catalog.get_product_by_slug("classic-aviator")
    assert found is not None
    return found


@pytest.fixture
def frame_only(catalog: InMemoryCatalogRepo) -> Product:
    """A product sold without lens options."""
    return catalog.save_product(
        Product(slug="glasses-case", title="Glasses Case", base_price=Decimal("800"))
    )


@pytest.fixture
def cart_repo() -> InMemoryCartRepo:
    return InMemoryCartRepo()


@pytest.fixture
def order_repo() -> InMemoryOrderRepo:
    return InMemoryOrderRepo()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 15, 10, 30, tzinfo=UTC))


@pytest.fixture
def migrations_dir() -> str:
    return str(PROJECT_ROOT / "migrations")


@pytest.fixture
def rules_path() -> Path:
    return PROJECT_ROOT / "rules.yaml"
