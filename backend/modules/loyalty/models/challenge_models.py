# backend/modules/loyalty/models/challenge_models.py

from sqlalchemy import (Column, Integer, String, ForeignKey, DateTime, Text,
                        Boolean, CheckConstraint, UniqueConstraint)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin, utcnow
from ..enums.loyalty_enums import RewardTier
from datetime import datetime


class Challenge(Base, TimestampMixin):
    """Time-boxed goal, e.g. place 5 orders this month"""
    __tablename__ = "challenges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    points = Column(Integer, nullable=False)
    target_count = Column(Integer, nullable=False)
    action_type = Column(String(30), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    minimum_tier = Column(String(20), nullable=False, default=RewardTier.BRONZE.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    image_url = Column(String(500), nullable=True)

    user_challenges = relationship("UserChallenge", back_populates="challenge")

    __table_args__ = (
        CheckConstraint('target_count > 0', name='challenge_target_positive'),
        CheckConstraint('points >= 0', name='challenge_points_non_negative'),
        CheckConstraint('end_date >= start_date', name='challenge_window_ordered'),
    )

    def is_running(self, at: datetime = None) -> bool:
        at = at or utcnow()
        return self.start_date <= at <= self.end_date

    def __repr__(self):
        return f"<Challenge(id={self.id}, name='{self.name}', target={self.target_count})>"


class UserChallenge(Base, TimestampMixin):
    """Per-user progress against a challenge. Frozen once completed."""
    __tablename__ = "user_challenges"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id"), nullable=False, index=True)
    current_count = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User")
    challenge = relationship("Challenge", back_populates="user_challenges")

    __table_args__ = (
        UniqueConstraint('user_id', 'challenge_id', name='uq_user_challenge'),
        CheckConstraint('current_count >= 0', name='user_challenge_count_non_negative'),
    )

    def __repr__(self):
        return (f"<UserChallenge(user_id={self.user_id}, challenge_id={self.challenge_id}, "
                f"count={self.current_count}, completed={self.completed})>")
