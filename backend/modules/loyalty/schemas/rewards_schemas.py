# backend/modules/loyalty/schemas/rewards_schemas.py

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from ..enums.loyalty_enums import RewardTier


class RewardResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    points_cost: int
    discount_amount: Optional[float] = None
    discount_percentage: Optional[int] = None
    valid_for_days: Optional[int] = None
    minimum_tier: RewardTier
    is_active: bool
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserRewardResponse(BaseModel):
    id: int
    user_id: int
    reward_id: int
    code: str
    redeemed: bool
    expires_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None
    created_at: datetime
    reward: Optional[RewardResponse] = None

    class Config:
        from_attributes = True


class RewardCodeVerifyRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
