from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from ..enums.loyalty_enums import RewardTier


class ChallengeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    points: int
    target_count: int
    action_type: str
    start_date: datetime
    end_date: datetime
    minimum_tier: RewardTier
    is_active: bool
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserChallengeResponse(BaseModel):
    id: int
    user_id: int
    challenge_id: int
    current_count: int
    completed: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserChallengeProgress(BaseModel):
    challenge: ChallengeResponse
    progress: UserChallengeResponse
