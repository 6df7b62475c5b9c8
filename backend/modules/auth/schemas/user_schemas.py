from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from ..enums.user_enums import UserRole
from modules.loyalty.enums.loyalty_enums import RewardTier


class UserProfile(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    role: UserRole
    loyalty_points: int
    reward_tier: RewardTier
    streak_count: int
    last_order_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DeliveryPartnerOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True
