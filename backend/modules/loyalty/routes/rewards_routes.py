# backend/modules/loyalty/routes/rewards_routes.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from core.database import get_db
from core.auth import get_current_user
from core.error_handling import handle_api_errors, NotFoundError
from modules.auth.models.user_models import User

from ..services.rewards_engine import RewardsEngine
from ..schemas.rewards_schemas import (
    RewardResponse,
    UserRewardResponse,
    RewardCodeVerifyRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Rewards"])


@router.get("/rewards", response_model=List[RewardResponse])
@handle_api_errors
async def list_rewards(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active rewards available at the caller's tier."""
    return RewardsEngine(db).get_rewards_by_tier(current_user.reward_tier)


@router.post(
    "/rewards/verify",
    response_model=UserRewardResponse,
)
@handle_api_errors
async def verify_reward_code(
    request: RewardCodeVerifyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Check that a reward code is unredeemed and unexpired.

    Raises:
        404: Invalid or expired reward code
    """
    user_reward = RewardsEngine(db).verify_reward_code(request.code.strip().upper())
    if not user_reward:
        raise NotFoundError("Reward code", request.code)
    return user_reward


@router.post(
    "/rewards/{reward_id}/redeem",
    response_model=UserRewardResponse,
    status_code=status.HTTP_201_CREATED,
)
@handle_api_errors
def redeem_reward(
    reward_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Spend points on a reward and receive a usage code.

    Raises:
        400: Insufficient points
        403: Reward requires a higher tier
        404: Reward not found
    """
    return RewardsEngine(db).redeem_reward(current_user.id, reward_id)


@router.get("/user-rewards", response_model=List[UserRewardResponse])
@handle_api_errors
async def list_user_rewards(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's redeemed rewards, newest first."""
    return RewardsEngine(db).get_user_rewards(current_user.id)
