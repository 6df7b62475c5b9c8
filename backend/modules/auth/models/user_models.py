# backend/modules/auth/models/user_models.py

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import CreatedAtMixin
from ..enums.user_enums import UserRole
from modules.loyalty.enums.loyalty_enums import RewardTier


class User(Base, CreatedAtMixin):
    """Marketplace account: customer, restaurant admin or delivery partner.

    ``loyalty_points`` and ``reward_tier`` are a projection of the loyalty
    ledger and are only written by ``LoyaltyService.record_activity``.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(30), nullable=True)
    full_name = Column(String(200), nullable=True)
    role = Column(String(30), nullable=False, default=UserRole.CUSTOMER.value, index=True)
    address = Column(Text, nullable=True)

    # Loyalty projection
    loyalty_points = Column(Integer, nullable=False, default=0)
    reward_tier = Column(String(20), nullable=False, default=RewardTier.BRONZE.value)
    streak_count = Column(Integer, nullable=False, default=0)
    last_order_date = Column(DateTime, nullable=True)

    restaurants = relationship("Restaurant", back_populates="owner")
    loyalty_activities = relationship(
        "LoyaltyActivity", back_populates="user", order_by="LoyaltyActivity.id"
    )

    __table_args__ = (
        Index('ix_users_role_id', 'role', 'id'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
