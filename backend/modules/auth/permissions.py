# backend/modules/auth/permissions.py

"""
Access control for order operations.

Status changes are authorized against explicit tables: which target
statuses each role may set, and which (current -> target) moves the order
state machine allows. ``TRANSITION_MATRIX`` is the product of the two and
is the single source consulted by ``check_status_update``.
"""

from typing import Dict, FrozenSet, Tuple

from core.error_handling import AuthorizationError, InvalidTransitionError
from modules.auth.enums.user_enums import UserRole
from modules.orders.enums.order_enums import OrderStatus


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PLACED: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

ROLE_TARGET_STATUSES: Dict[UserRole, FrozenSet[OrderStatus]] = {
    UserRole.CUSTOMER: frozenset(),
    UserRole.RESTAURANT_ADMIN: frozenset({
        OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.CANCELLED
    }),
    UserRole.DELIVERY_PARTNER: frozenset({
        OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED
    }),
}

TRANSITION_MATRIX: FrozenSet[Tuple[UserRole, OrderStatus, OrderStatus]] = frozenset(
    (role, current, target)
    for role, targets in ROLE_TARGET_STATUSES.items()
    for current, reachable in ORDER_TRANSITIONS.items()
    for target in targets & reachable
)

# Statuses during which a delivery partner may be assigned
PARTNER_ASSIGNABLE_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.CONFIRMED, OrderStatus.PREPARING
})


def is_legal_transition(current: str, target: str) -> bool:
    return OrderStatus(target) in ORDER_TRANSITIONS[OrderStatus(current)]


def can_transition(role: str, current: str, target: str) -> bool:
    """Pure lookup in the role x current x target matrix."""
    try:
        key = (UserRole(role), OrderStatus(current), OrderStatus(target))
    except ValueError:
        return False
    return key in TRANSITION_MATRIX


def owns_restaurant(user, order) -> bool:
    return (
        user.role == UserRole.RESTAURANT_ADMIN.value
        and order.restaurant is not None
        and order.restaurant.owner_id == user.id
    )


def is_assigned_partner(user, order) -> bool:
    return (
        user.role == UserRole.DELIVERY_PARTNER.value
        and order.delivery_partner_id is not None
        and order.delivery_partner_id == user.id
    )


def can_view_order(user, order) -> bool:
    if user.role == UserRole.CUSTOMER.value:
        return order.customer_id == user.id
    return owns_restaurant(user, order) or is_assigned_partner(user, order)


def check_order_access(user, order) -> None:
    """
    Raise AuthorizationError unless ``user`` is the order's customer, the
    owning restaurant's admin or the assigned delivery partner.
    """
    if not can_view_order(user, order):
        raise AuthorizationError(
            "You do not have access to this order",
            details={"order_id": order.id},
        )


def check_restaurant_owner(user, order) -> None:
    if not owns_restaurant(user, order):
        raise AuthorizationError(
            "Only the restaurant's administrator can manage this order",
            details={"order_id": order.id},
        )


def check_status_update(user, order, target_status: str) -> None:
    """
    Authorize ``user`` moving ``order`` into ``target_status``.

    Role and ownership are checked first (AuthorizationError), then the
    move itself against the matrix (InvalidTransitionError).
    """
    try:
        role = UserRole(user.role)
    except ValueError:
        raise AuthorizationError("Unknown role", details={"role": user.role})

    if OrderStatus(target_status) not in ROLE_TARGET_STATUSES[role]:
        raise AuthorizationError(
            f"Role {role.value} cannot set order status to {target_status}",
            details={"role": role.value, "target_status": target_status},
        )

    if role == UserRole.RESTAURANT_ADMIN:
        check_restaurant_owner(user, order)
    elif role == UserRole.DELIVERY_PARTNER and not is_assigned_partner(user, order):
        raise AuthorizationError(
            "Only the assigned delivery partner can update this order",
            details={"order_id": order.id},
        )

    if not can_transition(role.value, order.status, target_status):
        raise InvalidTransitionError(order.status, target_status)
