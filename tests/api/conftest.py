from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lenscart.api import deps
from lenscart.api.auth_utils import create_access_token
from lenscart.api.routes import (
    admin_lens_types,
    admin_orders,
    admin_products,
    cart,
    checkout,
    orders,
    prescriptions,
    products,
)

JWT_SECRET = "test-secret"
SESSION = "guest-session-0001"


@pytest.fixture
def settings(tmp_path) -> deps.Settings:
    settings = deps.Settings()
    settings.data_dir = tmp_path
    settings.jwt_secret = JWT_SECRET
    return settings


@pytest.fixture
def app(settings, catalog, cart_repo, order_repo, store, clock) -> FastAPI:
    """API app wired to in-memory repositories."""
    app = FastAPI()
    app.include_router(products.router, prefix="/api/products")
    app.include_router(prescriptions.router, prefix="/api/prescriptions")
    app.include_router(cart.router, prefix="/api/cart")
    app.include_router(checkout.router, prefix="/api/checkout")
    app.include_router(orders.router, prefix="/api/orders")
    app.include_router(admin_orders.router, prefix="/api/admin/orders")
    app.include_router(admin_lens_types.router, prefix="/api/admin")
    app.include_router(admin_products.router, prefix="/api/admin")

    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_catalog_repo] = lambda: catalog
    app.dependency_overrides[deps.get_cart_repo] = lambda: cart_repo
    app.dependency_overrides[deps.get_order_repo] = lambda: order_repo
    app.dependency_overrides[deps.get_file_store] = lambda: store
    app.dependency_overrides[deps.get_clock] = lambda: clock
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def auth_headers(user_id: UUID | None = None, roles: list[str] | None = None) -> dict[str, str]:
    claims = {"sub": str(user_id or uuid4()), "app_roles": roles or []}
    return {"Authorization": f"Bearer {create_access_token(claims, JWT_SECRET)}"}


@pytest.fixture
def customer_id() -> UUID:
    return uuid4()


@pytest.fixture
def customer(customer_id) -> dict[str, str]:
    return auth_headers(customer_id)


@pytest.fixture
def admin() -> dict[str, str]:
    return auth_headers(roles=["admin"])


@pytest.fixture
def guest() -> dict[str, str]:
    return {"X-Cart-Session": SESSION}


@pytest.fixture
def auth():
    """Header factory for arbitrary users."""
    return auth_headers
