# backend/modules/loyalty/schemas/loyalty_schemas.py

from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from ..enums.loyalty_enums import RewardTier, LoyaltyAction


class PointsSummary(BaseModel):
    points: int
    tier: RewardTier
    streak_count: int


class LoyaltyActivityResponse(BaseModel):
    id: int
    user_id: int
    action: LoyaltyAction
    points: int
    description: Optional[str] = None
    order_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReconciliationResult(BaseModel):
    user_id: int
    cached_balance: int
    ledger_balance: int
    drift: int
    tier: RewardTier
