# backend/tests/factories/__init__.py

"""
Shared test factories for the SwiftBite backend.
"""

from .base import BaseFactory, bind_session, reset_session
from .auth import UserFactory, RestaurantAdminFactory, DeliveryPartnerFactory
from .menu import RestaurantFactory, MenuItemFactory
from .order import OrderFactory
from .loyalty import RewardFactory, ChallengeFactory, UserChallengeFactory

__all__ = [
    'BaseFactory',
    'bind_session',
    'reset_session',
    'UserFactory',
    'RestaurantAdminFactory',
    'DeliveryPartnerFactory',
    'RestaurantFactory',
    'MenuItemFactory',
    'OrderFactory',
    'RewardFactory',
    'ChallengeFactory',
    'UserChallengeFactory',
]
