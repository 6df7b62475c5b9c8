# backend/modules/loyalty/models/rewards_models.py

from sqlalchemy import (Column, Integer, String, ForeignKey, DateTime,
                        Numeric, Text, Boolean, Index, CheckConstraint)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin, CreatedAtMixin, utcnow
from ..enums.loyalty_enums import RewardTier


class Reward(Base, TimestampMixin):
    """Catalog entry of a perk redeemable for points"""
    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    points_cost = Column(Integer, nullable=False)

    # One of the two discount forms applies
    discount_amount = Column(Numeric(10, 2), nullable=True)
    discount_percentage = Column(Integer, nullable=True)

    valid_for_days = Column(Integer, nullable=True)  # None means no expiry
    minimum_tier = Column(String(20), nullable=False, default=RewardTier.BRONZE.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    image_url = Column(String(500), nullable=True)

    user_rewards = relationship("UserReward", back_populates="reward")

    __table_args__ = (
        CheckConstraint('points_cost >= 0', name='reward_points_cost_non_negative'),
        CheckConstraint('valid_for_days > 0 OR valid_for_days IS NULL', name='reward_valid_days_positive'),
        CheckConstraint('discount_percentage >= 0 AND discount_percentage <= 100 OR discount_percentage IS NULL',
                        name='reward_percentage_valid_range'),
    )

    def __repr__(self):
        return f"<Reward(id={self.id}, name='{self.name}', points_cost={self.points_cost})>"


class UserReward(Base, CreatedAtMixin):
    """A redeemed reward instance carrying a unique usage code"""
    __tablename__ = "user_rewards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reward_id = Column(Integer, ForeignKey("rewards.id"), nullable=False, index=True)
    code = Column(String(8), unique=True, nullable=False, index=True)
    redeemed = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime, nullable=True)
    redeemed_at = Column(DateTime, nullable=True)

    user = relationship("User")
    reward = relationship("Reward", back_populates="user_rewards")

    __table_args__ = (
        Index('ix_user_rewards_user_redeemed', 'user_id', 'redeemed'),
    )

    @property
    def is_expired(self) -> bool:
        """Check if the code is past its expiry"""
        return self.expires_at is not None and self.expires_at < utcnow()

    @property
    def is_usable(self) -> bool:
        return not self.redeemed and not self.is_expired

    def __repr__(self):
        return f"<UserReward(id={self.id}, user_id={self.user_id}, code='{self.code}', redeemed={self.redeemed})>"
