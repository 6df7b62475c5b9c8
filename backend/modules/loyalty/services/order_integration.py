# backend/modules/loyalty/services/order_integration.py

from sqlalchemy.orm import Session
from typing import Optional
from decimal import Decimal, ROUND_FLOOR
import logging

from ..enums.loyalty_enums import LoyaltyAction
from ..models.loyalty_models import LoyaltyActivity
from .loyalty_service import LoyaltyService


logger = logging.getLogger(__name__)

POINTS_PER_CURRENCY_UNIT = 10


def calculate_order_points(amount) -> int:
    """floor(amount x 10)"""
    points = Decimal(str(amount)) * POINTS_PER_CURRENCY_UNIT
    return int(points.to_integral_value(rounding=ROUND_FLOOR))


class OrderLoyaltyIntegration:
    """Awards loyalty points when orders are placed"""

    def __init__(self, db: Session):
        self.db = db
        self.loyalty_service = LoyaltyService(db)

    def award_order_points(self, order) -> Optional[LoyaltyActivity]:
        """
        Award ``place_order`` points for a committed order.

        Failures are logged for reconciliation and never propagate: the
        order stays placed whether or not the points were written.
        """
        points = calculate_order_points(order.amount)
        try:
            return self.loyalty_service.add_loyalty_points(
                order.customer_id,
                LoyaltyAction.PLACE_ORDER,
                points,
                description=f"Points earned for order #{order.id}",
                order_id=order.id,
            )
        except Exception as e:
            logger.error(
                f"Failed to award {points} loyalty points for order {order.id} "
                f"(user {order.customer_id}): {str(e)}",
                exc_info=True,
            )
            return None
