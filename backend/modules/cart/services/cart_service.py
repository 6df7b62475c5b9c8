# backend/modules/cart/services/cart_service.py

"""
Server-side shopping carts, one per user.

Carts live in process memory. Order placement only ever sees an immutable
``snapshot()`` of a cart.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from threading import RLock
from typing import Dict, List, Tuple
import logging

from core.error_handling import APIValidationError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    menu_item_id: int
    name: str
    price: Decimal
    quantity: int
    restaurant_id: int
    is_veg: bool = False


class CartStore:
    """Thread-safe in-memory carts keyed by user id"""

    def __init__(self):
        self._carts: Dict[int, List[CartLine]] = {}
        self._lock = RLock()

    def snapshot(self, user_id: int) -> Tuple[CartLine, ...]:
        with self._lock:
            return tuple(self._carts.get(user_id, []))

    def add_item(self, user_id: int, menu_item, quantity: int = 1) -> Tuple[CartLine, ...]:
        """
        Add ``quantity`` of a menu item, capturing its current price.

        All lines in a cart must come from the same restaurant.
        """
        if quantity <= 0:
            raise APIValidationError(
                "Quantity must be positive", {"quantity": quantity}
            )
        if not menu_item.is_available:
            raise APIValidationError(
                f"Menu item {menu_item.id} is not available",
                {"menu_item_id": menu_item.id},
            )

        with self._lock:
            lines = self._carts.setdefault(user_id, [])
            if lines and lines[0].restaurant_id != menu_item.restaurant_id:
                raise APIValidationError(
                    "Cart can only contain items from one restaurant",
                    {"restaurant_id": lines[0].restaurant_id},
                )

            for index, line in enumerate(lines):
                if line.menu_item_id == menu_item.id:
                    lines[index] = replace(line, quantity=line.quantity + quantity)
                    break
            else:
                lines.append(
                    CartLine(
                        menu_item_id=menu_item.id,
                        name=menu_item.name,
                        price=Decimal(str(menu_item.price)),
                        quantity=quantity,
                        restaurant_id=menu_item.restaurant_id,
                        is_veg=bool(menu_item.is_veg),
                    )
                )
            return tuple(lines)

    def update_quantity(self, user_id: int, menu_item_id: int, quantity: int) -> Tuple[CartLine, ...]:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove_item(user_id, menu_item_id)

        with self._lock:
            lines = self._carts.get(user_id, [])
            for index, line in enumerate(lines):
                if line.menu_item_id == menu_item_id:
                    lines[index] = replace(line, quantity=quantity)
                    return tuple(lines)
        raise NotFoundError("Cart item", menu_item_id)

    def remove_item(self, user_id: int, menu_item_id: int) -> Tuple[CartLine, ...]:
        with self._lock:
            lines = self._carts.get(user_id, [])
            remaining = [line for line in lines if line.menu_item_id != menu_item_id]
            if len(remaining) == len(lines):
                raise NotFoundError("Cart item", menu_item_id)
            if remaining:
                self._carts[user_id] = remaining
            else:
                self._carts.pop(user_id, None)
            return tuple(remaining)

    def clear(self, user_id: int) -> None:
        with self._lock:
            self._carts.pop(user_id, None)


cart_store = CartStore()


def get_cart_store() -> CartStore:
    return cart_store
