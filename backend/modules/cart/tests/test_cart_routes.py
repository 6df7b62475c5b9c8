# backend/modules/cart/tests/test_cart_routes.py

import pytest
from decimal import Decimal

from tests.factories import UserFactory, MenuItemFactory


@pytest.mark.integration
class TestCartEndpoints:

    def test_add_update_remove_flow(self, client, auth_headers, db_session):
        user = UserFactory()
        headers = auth_headers(user)
        dish = MenuItemFactory(price=Decimal("125.00"))

        response = client.post(
            "/api/v1/cart", json={"menu_item_id": dish.id, "quantity": 2}, headers=headers
        )
        assert response.status_code == 201
        assert response.json()["restaurant_id"] == dish.restaurant_id

        summary = client.get("/api/v1/cart/summary", headers=headers).json()
        assert summary == {
            "item_count": 2,
            "subtotal": 250.0,
            "delivery_fee": 30.0,
            "tax": 12.5,
            "discount": 100.0,
            "total": 192.5,
        }

        response = client.put(f"/api/v1/cart/{dish.id}", json={"quantity": 1}, headers=headers)
        assert response.json()["items"][0]["quantity"] == 1

        response = client.delete(f"/api/v1/cart/{dish.id}", headers=headers)
        assert response.json() == {"items": [], "restaurant_id": None}

    def test_other_restaurant_is_rejected(self, client, auth_headers, db_session):
        user = UserFactory()
        headers = auth_headers(user)
        first, second = MenuItemFactory(), MenuItemFactory()

        client.post("/api/v1/cart", json={"menu_item_id": first.id}, headers=headers)
        response = client.post("/api/v1/cart", json={"menu_item_id": second.id}, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"

    def test_unknown_menu_item(self, client, auth_headers, db_session):
        response = client.post(
            "/api/v1/cart", json={"menu_item_id": 999}, headers=auth_headers(UserFactory())
        )

        assert response.status_code == 404

    def test_clear_cart(self, client, auth_headers, db_session, cart_store):
        user = UserFactory()
        headers = auth_headers(user)
        client.post("/api/v1/cart", json={"menu_item_id": MenuItemFactory().id}, headers=headers)

        response = client.delete("/api/v1/cart", headers=headers)

        assert response.status_code == 204
        assert cart_store.snapshot(user.id) == ()
