"""Import every ORM model so relationships resolve and metadata is complete."""

from modules.auth.models.user_models import User
from modules.restaurants.models.restaurant_models import Restaurant, MenuItem
from modules.orders.models.order_models import Order, OrderItem
from modules.loyalty.models.loyalty_models import LoyaltyActivity
from modules.loyalty.models.rewards_models import Reward, UserReward
from modules.loyalty.models.challenge_models import Challenge, UserChallenge

__all__ = [
    "User",
    "Restaurant",
    "MenuItem",
    "Order",
    "OrderItem",
    "LoyaltyActivity",
    "Reward",
    "UserReward",
    "Challenge",
    "UserChallenge",
]
