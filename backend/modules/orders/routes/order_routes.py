# backend/modules/orders/routes/order_routes.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from core.database import get_db
from core.auth import get_current_user, require_roles
from core.error_handling import handle_api_errors
from modules.auth.enums.user_enums import UserRole
from modules.auth.models.user_models import User
from modules.cart.services.cart_service import CartStore, get_cart_store

from ..services.order_service import OrderLifecycleService
from ..schemas.order_schemas import (
    OrderCreate, OrderOut, OrderStatusUpdate, DeliveryPartnerAssignment
)

router = APIRouter(prefix="/api/v1/orders", tags=["Orders"])


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
@handle_api_errors
def place_order(
    order_in: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.CUSTOMER)),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Place an order from the caller's cart. The cart is cleared on success.

    Raises:
        400: Cart is empty or invalid
        403: Caller is not a customer
    """
    service = OrderLifecycleService(db)
    order = service.create_order(
        current_user.id, cart.snapshot(current_user.id), order_in.delivery_address
    )
    cart.clear(current_user.id)
    return order


@router.get("", response_model=List[OrderOut])
@handle_api_errors
async def list_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List orders visible to the caller, newest first.

    - customers: their own orders
    - restaurant admins: orders of every restaurant they own
    - delivery partners: orders assigned to them
    """
    return OrderLifecycleService(db).list_orders_for_actor(current_user)


@router.get("/{order_id}", response_model=OrderOut)
@handle_api_errors
async def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Raises:
        403: Caller is not the customer, owning admin or assigned partner
        404: Order not found
    """
    return OrderLifecycleService(db).get_order(order_id, current_user)


@router.put("/{order_id}/status", response_model=OrderOut)
@handle_api_errors
def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(
        require_roles(UserRole.RESTAURANT_ADMIN, UserRole.DELIVERY_PARTNER)
    ),
):
    """
    Move an order to a new status.

    Raises:
        400: Transition not allowed from the current status
        403: Role, ownership or assignment check failed
        404: Order not found
        409: Order changed concurrently
    """
    return OrderLifecycleService(db).update_status(
        order_id,
        current_user,
        update.status.value,
        delivery_partner_id=update.delivery_partner_id,
    )


@router.post("/{order_id}/assign", response_model=OrderOut)
@handle_api_errors
def assign_delivery_partner(
    order_id: int,
    assignment: DeliveryPartnerAssignment,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.RESTAURANT_ADMIN)),
):
    """Assign a delivery partner to an order of the caller's restaurant."""
    return OrderLifecycleService(db).assign_delivery_partner(
        order_id, current_user, assignment.delivery_partner_id
    )
