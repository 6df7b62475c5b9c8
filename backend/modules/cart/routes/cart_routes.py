# backend/modules/cart/routes/cart_routes.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.auth import get_current_user
from core.error_handling import handle_api_errors, NotFoundError
from modules.auth.models.user_models import User
from modules.restaurants.models.restaurant_models import MenuItem
from modules.orders.services.pricing_service import calculate_totals

from ..services.cart_service import CartStore, get_cart_store
from ..schemas.cart_schemas import (
    CartItemAdd,
    CartItemUpdate,
    CartLineOut,
    CartOut,
    CartSummary,
)

router = APIRouter(prefix="/api/v1/cart", tags=["Cart"])


def _cart_response(lines) -> CartOut:
    return CartOut(
        items=[CartLineOut.model_validate(line) for line in lines],
        restaurant_id=lines[0].restaurant_id if lines else None,
    )


@router.get("", response_model=CartOut)
@handle_api_errors
async def get_cart(
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    """Return the caller's cart."""
    return _cart_response(cart.snapshot(current_user.id))


@router.post("", response_model=CartOut, status_code=status.HTTP_201_CREATED)
@handle_api_errors
async def add_cart_item(
    item: CartItemAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Add a menu item to the cart.

    Raises:
        404: Menu item not found
        400: Item unavailable or from a different restaurant
    """
    menu_item = db.query(MenuItem).filter(MenuItem.id == item.menu_item_id).first()
    if not menu_item:
        raise NotFoundError("MenuItem", item.menu_item_id)

    return _cart_response(cart.add_item(current_user.id, menu_item, item.quantity))


@router.put("/{menu_item_id}", response_model=CartOut)
@handle_api_errors
async def update_cart_item(
    menu_item_id: int,
    update: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    """Set the quantity of a cart line. A quantity of zero removes it."""
    return _cart_response(
        cart.update_quantity(current_user.id, menu_item_id, update.quantity)
    )


@router.delete("/{menu_item_id}", response_model=CartOut)
@handle_api_errors
async def remove_cart_item(
    menu_item_id: int,
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    return _cart_response(cart.remove_item(current_user.id, menu_item_id))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
@handle_api_errors
async def clear_cart(
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    cart.clear(current_user.id)


@router.get("/summary", response_model=CartSummary)
@handle_api_errors
async def get_cart_summary(
    current_user: User = Depends(get_current_user),
    cart: CartStore = Depends(get_cart_store),
):
    """Pricing breakdown for the current cart."""
    lines = cart.snapshot(current_user.id)
    return CartSummary(
        item_count=sum(line.quantity for line in lines),
        **calculate_totals(lines).to_dict(),
    )
