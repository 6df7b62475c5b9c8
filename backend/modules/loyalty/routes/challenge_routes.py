# backend/modules/loyalty/routes/challenge_routes.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from core.database import get_db
from core.auth import get_current_user
from core.error_handling import handle_api_errors
from modules.auth.models.user_models import User

from ..services.challenge_service import ChallengeService
from ..schemas.challenge_schemas import (
    ChallengeResponse,
    UserChallengeResponse,
    UserChallengeProgress,
)

router = APIRouter(prefix="/api/v1", tags=["Challenges"])


@router.get("/challenges", response_model=List[ChallengeResponse])
@handle_api_errors
async def list_challenges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Running challenges open to the caller's tier."""
    return ChallengeService(db).get_available_challenges(current_user.reward_tier)


@router.get("/user-challenges", response_model=List[UserChallengeProgress])
@handle_api_errors
async def list_user_challenges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's uncompleted enrolments with progress."""
    pairs = ChallengeService(db).get_active_user_challenges(current_user.id)
    return [
        UserChallengeProgress(
            challenge=ChallengeResponse.model_validate(challenge),
            progress=UserChallengeResponse.model_validate(progress),
        )
        for challenge, progress in pairs
    ]


@router.post(
    "/challenges/{challenge_id}/enroll",
    response_model=UserChallengeResponse,
    status_code=status.HTTP_201_CREATED,
)
@handle_api_errors
def enroll_in_challenge(
    challenge_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Enrol the caller in a challenge. Enrolling twice returns the existing row.

    Raises:
        400: Challenge window is not open
        403: Challenge requires a higher tier
        404: Challenge not found
    """
    return ChallengeService(db).enroll(current_user.id, challenge_id)


@router.post("/challenges/{challenge_id}/progress", response_model=UserChallengeResponse)
@handle_api_errors
def log_challenge_progress(
    challenge_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Advance the caller's progress by one. No-op once completed.

    Raises:
        404: Challenge not found or not enrolled
    """
    return ChallengeService(db).update_user_challenge_progress(
        current_user.id, challenge_id
    )
