# backend/modules/restaurants/tests/test_restaurant_routes.py

import pytest
from decimal import Decimal

from tests.factories import RestaurantFactory, MenuItemFactory, UserFactory


@pytest.mark.integration
class TestRestaurantBrowsing:

    def test_lists_open_restaurants_without_auth(self, client, db_session):
        dosa = RestaurantFactory(name="Dosa Corner", cuisine_types="South Indian")
        biryani = RestaurantFactory(name="Biryani House", cuisine_types="Mughlai")
        RestaurantFactory(name="Closed Kitchen", is_open=False)

        response = client.get("/api/v1/restaurants")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [biryani.id, dosa.id]

    def test_search_by_name_or_cuisine(self, client, db_session):
        dosa = RestaurantFactory(name="Dosa Corner", cuisine_types="South Indian")
        RestaurantFactory(name="Biryani House", cuisine_types="Mughlai")

        by_cuisine = client.get("/api/v1/restaurants", params={"query": "south"}).json()
        by_name = client.get("/api/v1/restaurants", params={"query": "DOSA"}).json()

        assert [r["id"] for r in by_cuisine] == [dosa.id]
        assert [r["id"] for r in by_name] == [dosa.id]

    def test_get_restaurant(self, client, db_session):
        restaurant = RestaurantFactory(name="Dosa Corner", delivery_time=25)

        response = client.get(f"/api/v1/restaurants/{restaurant.id}")

        assert response.status_code == 200
        assert response.json()["delivery_time"] == 25

    def test_unknown_restaurant(self, client, db_session):
        response = client.get("/api/v1/restaurants/999")

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "NOT_FOUND"

    def test_menu_lists_available_items(self, client, db_session):
        restaurant = RestaurantFactory()
        dosa = MenuItemFactory(restaurant=restaurant, name="Masala Dosa", price=Decimal("90.00"))
        MenuItemFactory(restaurant=restaurant, name="Filter Coffee", is_available=False)
        MenuItemFactory(name="Elsewhere")

        response = client.get(f"/api/v1/restaurants/{restaurant.id}/menu")

        assert response.status_code == 200
        assert [(i["id"], i["price"]) for i in response.json()] == [(dosa.id, 90.0)]

    def test_menu_item_ids_feed_the_cart(self, client, auth_headers, db_session):
        restaurant = RestaurantFactory()
        MenuItemFactory(restaurant=restaurant)
        [item] = client.get(f"/api/v1/restaurants/{restaurant.id}/menu").json()

        response = client.post(
            "/api/v1/cart",
            json={"menu_item_id": item["id"], "quantity": 2},
            headers=auth_headers(UserFactory()),
        )

        assert response.status_code == 201
        assert response.json()["restaurant_id"] == restaurant.id

    def test_menu_of_unknown_restaurant(self, client, db_session):
        assert client.get("/api/v1/restaurants/999/menu").status_code == 404
