from fastapi.testclient import TestClient

from lenscart.api.main import app


def test_health() -> None:
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "api"}


def test_routes_mounted() -> None:
    paths = {route.path for route in app.routes}
    assert "/api/products/{slug}" in paths
    assert "/api/cart/items" in paths
    assert "/api/checkout" in paths
    assert "/api/admin/orders/{order_id}/items/{item_id}/prescription" in paths
