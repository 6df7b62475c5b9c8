import pytest
from decimal import Decimal

from modules.cart.services.cart_service import CartLine
from tests.factories import (
    UserFactory, RestaurantFactory, MenuItemFactory, DeliveryPartnerFactory,
)


@pytest.fixture
def customer(db_session):
    return UserFactory()


@pytest.fixture
def restaurant(db_session):
    return RestaurantFactory(delivery_time=40)


@pytest.fixture
def restaurant_admin(restaurant):
    return restaurant.owner


@pytest.fixture
def delivery_partner(db_session):
    return DeliveryPartnerFactory()


@pytest.fixture
def menu_items(restaurant):
    """Two dishes at 50.00 and 25.00"""
    return [
        MenuItemFactory(restaurant=restaurant, name="Paneer Tikka", price=Decimal("50.00")),
        MenuItemFactory(restaurant=restaurant, name="Masala Chai", price=Decimal("25.00")),
    ]


@pytest.fixture
def make_cart():
    """Build a cart snapshot from (menu_item, quantity) pairs."""
    def _make(*entries):
        return tuple(
            CartLine(
                menu_item_id=item.id,
                name=item.name,
                price=Decimal(str(item.price)),
                quantity=quantity,
                restaurant_id=item.restaurant_id,
            )
            for item, quantity in entries
        )
    return _make
