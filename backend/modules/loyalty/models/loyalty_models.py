# backend/modules/loyalty/models/loyalty_models.py

from sqlalchemy import Column, Integer, String, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import CreatedAtMixin


class LoyaltyActivity(Base, CreatedAtMixin):
    """Append-only points ledger entry. Positive points earn, negative spend."""
    __tablename__ = "loyalty_activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(30), nullable=False, index=True)
    points = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)

    user = relationship("User", back_populates="loyalty_activities")
    order = relationship("Order")

    __table_args__ = (
        Index('ix_loyalty_activities_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return (f"<LoyaltyActivity(id={self.id}, user_id={self.user_id}, "
                f"action='{self.action}', points={self.points})>")
