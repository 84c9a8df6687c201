"""
Admin order API tests - review, fulfillment detail, prescription files.
"""

from uuid import uuid4

import pytest

from lenscart.api.routes.admin_orders import build_content_disposition

PNG = b"\x89PNG\r\n\x1a\n" + b"\x01" * 16

ADDRESS = {
    "full_name": "Ayesha Khan",
    "phone": "03001234567",
    "address_line1": "12 Mall Road",
    "city": "Lahore",
}


@pytest.fixture
def placed_order(client, customer, catalog, product):
    """An order with one uploaded-prescription line and one manual line with prism."""
    file_ref = client.post(
        "/api/prescriptions", files={"file": ("rx.png", PNG, "image/png")}, headers=customer
    ).json()["file"]
    standard = str(catalog.lens_type_by_name("Standard").id)

    for lens in (
        {
            "has_eyesight": True,
            "lens_type_id": standard,
            "prescription_type": "upload",
            "prescription_file": file_ref,
        },
        {
            "has_eyesight": True,
            "lens_type_id": standard,
            "prescription_type": "manual",
            "prescription_data": {
                "rightEye": {"sph": "-2.00", "pd": "64"},
                "leftEye": {"sph": "-1.75", "pd": "64"},
                "addPrism": True,
                "rightPrism": {"verticalPrism": "1.00", "verticalBase": "Up"},
                "leftPrism": {},
            },
        },
    ):
        response = client.post(
            "/api/cart/items", json={"product_id": str(product.id), "lens": lens}, headers=customer
        )
        assert response.status_code == 201

    response = client.post(
        "/api/checkout", json={"shipping_address": ADDRESS, "payment_method": "card"}, headers=customer
    )
    assert response.status_code == 201
    return response.json()


class TestAccess:
    def test_customers_are_forbidden(self, client, customer) -> None:
        assert client.get("/api/admin/orders", headers=customer).status_code == 403

    def test_anonymous_is_unauthorized(self, client) -> None:
        assert client.get("/api/admin/orders").status_code == 401


class TestReview:
    def test_list(self, client, admin, placed_order) -> None:
        data = client.get("/api/admin/orders", headers=admin).json()
        assert data["total"] == 1
        assert data["items"][0]["order_number"] == placed_order["order_number"]

    def test_detail_lays_out_each_line(self, client, admin, placed_order) -> None:
        response = client.get(f"/api/admin/orders/{placed_order['id']}", headers=admin)
        assert response.status_code == 200

        uploaded, manual = response.json()["lines"]
        assert uploaded["product_title"] == "Classic Aviator"
        assert uploaded["fulfillment"]["prescription_type"] == "upload"
        assert uploaded["fulfillment"]["file"]["filename"] == "rx.png"
        assert uploaded["fulfillment"]["lens_type_name"] == "Standard"

        view = manual["fulfillment"]
        assert view["lens_option"] == "Eyesight Lenses (Prescription)"
        assert view["pd_display"] == "64"
        assert view["show_prism_table"] is True
        assert view["prism_rows"][0]["vertical_base"] == "Up"
        assert view["prism_rows"][1]["vertical_prism"] == "0.00"

    def test_detail_not_found(self, client, admin) -> None:
        assert client.get(f"/api/admin/orders/{uuid4()}", headers=admin).status_code == 404


class TestUpdate:
    def test_ship_with_tracking(self, client, admin, placed_order) -> None:
        response = client.patch(
            f"/api/admin/orders/{placed_order['id']}",
            json={"status": "shipped", "tracking_number": "TCS-123"},
            headers=admin,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "shipped"
        assert response.json()["tracking_number"] == "TCS-123"
        assert response.json()["items"] == placed_order["items"]

    def test_invalid_status(self, client, admin, placed_order) -> None:
        response = client.patch(
            f"/api/admin/orders/{placed_order['id']}", json={"status": "teleported"}, headers=admin
        )
        assert response.status_code == 400

    def test_unknown_order(self, client, admin) -> None:
        response = client.patch(f"/api/admin/orders/{uuid4()}", json={"status": "shipped"}, headers=admin)
        assert response.status_code == 404


class TestPrescriptionFile:
    def test_serves_private_file(self, client, admin, placed_order) -> None:
        item_id = placed_order["items"][0]["id"]
        response = client.get(
            f"/api/admin/orders/{placed_order['id']}/items/{item_id}/prescription", headers=admin
        )
        assert response.status_code == 200
        assert response.content == PNG
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "private, no-store"
        assert response.headers["content-disposition"].startswith('inline; filename="rx.png"')

    def test_manual_line_has_no_file(self, client, admin, placed_order) -> None:
        item_id = placed_order["items"][1]["id"]
        response = client.get(
            f"/api/admin/orders/{placed_order['id']}/items/{item_id}/prescription", headers=admin
        )
        assert response.status_code == 404

    def test_customers_cannot_download(self, client, customer, placed_order) -> None:
        item_id = placed_order["items"][0]["id"]
        response = client.get(
            f"/api/admin/orders/{placed_order['id']}/items/{item_id}/prescription", headers=customer
        )
        assert response.status_code == 403


class TestContentDisposition:
    def test_plain_name(self) -> None:
        assert build_content_disposition("rx.png") == "inline; filename=\"rx.png\"; filename*=UTF-8''rx.png"

    def test_quotes_and_newlines_cannot_break_the_header(self) -> None:
        header = build_content_disposition('a"b\r\nSet-Cookie: x=1.png')
        assert "\r" not in header and "\n" not in header
        assert header.startswith('inline; filename="a_b__Set-Cookie: x=1.png";')
        assert "filename*=UTF-8''a%22b%0D%0ASet-Cookie%3A%20x%3D1.png" in header

    def test_non_ascii_name_is_encoded(self) -> None:
        header = build_content_disposition("nuskha é.pdf")
        header.encode("latin-1")
        assert 'filename="nuskha _.pdf"' in header
        assert "filename*=UTF-8''nuskha%20%C3%A9.pdf" in header
