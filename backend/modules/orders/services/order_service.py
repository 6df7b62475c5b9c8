# backend/modules/orders/services/order_service.py

"""
Order lifecycle: placement from a cart snapshot, role-gated status changes,
delivery partner assignment and ownership-checked reads.
"""

import logging
from datetime import timedelta
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc

from ..enums.order_enums import OrderStatus
from ..models.order_models import Order, OrderItem
from .pricing_service import calculate_totals, OrderTotals
from modules.auth.enums.user_enums import UserRole
from modules.auth.models.user_models import User
from modules.auth.permissions import (
    PARTNER_ASSIGNABLE_STATUSES, check_order_access, check_restaurant_owner,
    check_status_update,
)
from modules.restaurants.models.restaurant_models import Restaurant
from modules.loyalty.services.order_integration import OrderLoyaltyIntegration
from core.error_handling import (
    NotFoundError, AuthorizationError, APIValidationError, ConflictError,
    InvalidTransitionError,
)
from core.database_retry import with_deadlock_retry
from core.mixins import utcnow

logger = logging.getLogger(__name__)


class OrderLifecycleService:
    """Owns all writes to orders and their items"""

    def __init__(self, db: Session):
        self.db = db
        self.loyalty_integration = OrderLoyaltyIntegration(db)

    # ========== Placement ==========

    def create_order(
        self, customer_id: int, cart: Sequence, delivery_address: str
    ) -> Order:
        """
        Place an order from a cart snapshot.

        Order and items are committed together. Loyalty points are awarded
        afterwards; a failed award is logged and does not affect the order.

        Raises:
            APIValidationError: Empty cart, mixed restaurants, bad quantity
                or missing delivery address
            NotFoundError: Customer or restaurant doesn't exist
        """
        lines = list(cart)
        if not lines:
            raise APIValidationError("Cart is empty")

        if not delivery_address or not delivery_address.strip():
            raise APIValidationError(
                "Delivery address is required", {"delivery_address": "required"}
            )

        restaurant_ids = {line.restaurant_id for line in lines}
        if len(restaurant_ids) != 1:
            raise APIValidationError(
                "All cart items must come from the same restaurant",
                {"restaurant_ids": sorted(restaurant_ids)},
            )

        for line in lines:
            if line.quantity <= 0:
                raise APIValidationError(
                    "Quantity must be positive",
                    {"menu_item_id": line.menu_item_id, "quantity": line.quantity},
                )

        customer = self.db.query(User).filter(User.id == customer_id).first()
        if not customer:
            raise NotFoundError("User", customer_id)

        restaurant_id = restaurant_ids.pop()
        restaurant = self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
        if not restaurant:
            raise NotFoundError("Restaurant", restaurant_id)

        totals = calculate_totals(lines)
        order = self._persist_order(
            customer_id, restaurant, lines, totals, delivery_address.strip()
        )

        logger.info(
            f"Order {order.id} placed by user {customer_id} at restaurant "
            f"{restaurant_id} for {order.amount}"
        )

        self.loyalty_integration.award_order_points(order)
        return order

    @with_deadlock_retry()
    def _persist_order(
        self,
        customer_id: int,
        restaurant: Restaurant,
        lines: List,
        totals: OrderTotals,
        delivery_address: str,
    ) -> Order:
        try:
            order = Order(
                customer_id=customer_id,
                restaurant_id=restaurant.id,
                status=OrderStatus.PLACED.value,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                tax=totals.tax,
                discount=totals.discount,
                amount=totals.total,
                delivery_address=delivery_address,
                estimated_delivery_time=utcnow()
                + timedelta(minutes=restaurant.delivery_time or 0),
            )
            self.db.add(order)
            self.db.flush()

            self._build_order_items(order, lines)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        return order

    def _build_order_items(self, order: Order, lines: List) -> List[OrderItem]:
        items = [
            OrderItem(
                order_id=order.id,
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                price=line.price,
            )
            for line in lines
        ]
        self.db.add_all(items)
        self.db.flush()
        return items

    # ========== Status changes ==========

    @with_deadlock_retry()
    def update_status(
        self,
        order_id: int,
        actor: User,
        target_status: str,
        delivery_partner_id: Optional[int] = None,
    ) -> Order:
        """
        Move an order to ``target_status`` on behalf of ``actor``.

        The order row is locked and the status is written with a
        compare-and-swap on the status read under the lock, so a concurrent
        change surfaces as ConflictError rather than an illegal transition.

        Raises:
            NotFoundError: Order doesn't exist
            AuthorizationError: Actor lacks role, ownership or assignment
            InvalidTransitionError: Target not reachable from current status
            ConflictError: Status changed concurrently
        """
        target = self._parse_status(target_status)

        try:
            order = self._lock_order(order_id)
            current_status = order.status

            check_status_update(actor, order, target.value)

            values = {
                Order.status: target.value,
                Order.updated_at: utcnow(),
            }
            if delivery_partner_id is not None:
                if actor.role != UserRole.RESTAURANT_ADMIN.value:
                    raise AuthorizationError(
                        "Only the restaurant's administrator can assign a delivery partner"
                    )
                if target not in PARTNER_ASSIGNABLE_STATUSES:
                    raise InvalidTransitionError(
                        current_status,
                        target.value,
                        message=f"Cannot assign a delivery partner to an order moving to {target.value}",
                    )
                self._get_delivery_partner(delivery_partner_id)
                values[Order.delivery_partner_id] = delivery_partner_id

            self._compare_and_set(order_id, current_status, values)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        order = self._load_order(order_id)
        logger.info(
            f"Order {order_id} status changed from {current_status} to {target.value} "
            f"by {actor.role} {actor.id}"
        )
        return order

    @with_deadlock_retry()
    def assign_delivery_partner(
        self, order_id: int, actor: User, delivery_partner_id: int
    ) -> Order:
        """
        Assign a delivery partner without changing the order status.

        Raises:
            NotFoundError: Order or partner doesn't exist
            AuthorizationError: Actor is not the owning restaurant's admin
            APIValidationError: Target user is not a delivery partner
            InvalidTransitionError: Order is not in an assignable status
        """
        try:
            order = self._lock_order(order_id)
            check_restaurant_owner(actor, order)
            self._get_delivery_partner(delivery_partner_id)

            current_status = order.status
            if OrderStatus(current_status) not in PARTNER_ASSIGNABLE_STATUSES:
                raise InvalidTransitionError(
                    current_status,
                    current_status,
                    message=f"Cannot assign a delivery partner while order is {current_status}",
                )

            self._compare_and_set(
                order_id,
                current_status,
                {
                    Order.delivery_partner_id: delivery_partner_id,
                    Order.updated_at: utcnow(),
                },
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Delivery partner {delivery_partner_id} assigned to order {order_id} "
            f"by user {actor.id}"
        )
        return self._load_order(order_id)

    # ========== Reads ==========

    def get_order(self, order_id: int, actor: User) -> Order:
        order = self._load_order(order_id)
        check_order_access(actor, order)
        return order

    def list_orders_for_actor(self, actor: User) -> List[Order]:
        """Orders visible to ``actor``, newest first"""
        query = self.db.query(Order).options(joinedload(Order.order_items))

        if actor.role == UserRole.CUSTOMER.value:
            query = query.filter(Order.customer_id == actor.id)
        elif actor.role == UserRole.RESTAURANT_ADMIN.value:
            owned = self.db.query(Restaurant.id).filter(Restaurant.owner_id == actor.id)
            query = query.filter(Order.restaurant_id.in_(owned.scalar_subquery()))
        elif actor.role == UserRole.DELIVERY_PARTNER.value:
            query = query.filter(Order.delivery_partner_id == actor.id)
        else:
            return []

        return query.order_by(desc(Order.created_at), desc(Order.id)).all()

    # ========== Helpers ==========

    @staticmethod
    def _parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise APIValidationError(
                f"Unknown order status: {value}",
                {"status": [s.value for s in OrderStatus]},
            )

    def _lock_order(self, order_id: int) -> Order:
        order = (
            self.db.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def _load_order(self, order_id: int) -> Order:
        order = (
            self.db.query(Order)
            .options(joinedload(Order.order_items), joinedload(Order.restaurant))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def _get_delivery_partner(self, user_id: int) -> User:
        partner = self.db.query(User).filter(User.id == user_id).first()
        if not partner:
            raise NotFoundError("User", user_id)
        if partner.role != UserRole.DELIVERY_PARTNER.value:
            raise APIValidationError(
                f"User {user_id} is not a delivery partner",
                {"delivery_partner_id": user_id},
            )
        return partner

    def _compare_and_set(self, order_id: int, expected_status: str, values: dict) -> None:
        updated = (
            self.db.query(Order)
            .filter(Order.id == order_id, Order.status == expected_status)
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            raise ConflictError(
                f"Order {order_id} was modified concurrently",
                details={"order_id": order_id, "expected_status": expected_status},
            )
