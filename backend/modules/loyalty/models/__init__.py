# backend/modules/loyalty/models/__init__.py

from .loyalty_models import LoyaltyActivity
from .rewards_models import Reward, UserReward
from .challenge_models import Challenge, UserChallenge

__all__ = [
    "LoyaltyActivity",
    "Reward",
    "UserReward",
    "Challenge",
    "UserChallenge",
]
