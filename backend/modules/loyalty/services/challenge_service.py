# backend/modules/loyalty/services/challenge_service.py

from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from datetime import datetime
import logging

from ..enums.loyalty_enums import LoyaltyAction
from ..models.challenge_models import Challenge, UserChallenge
from .loyalty_service import LoyaltyService, tier_rank, tiers_at_or_below
from modules.auth.models.user_models import User
from core.error_handling import NotFoundError, AuthorizationError, APIValidationError
from core.database_retry import with_deadlock_retry
from core.mixins import utcnow

logger = logging.getLogger(__name__)


class ChallengeService:
    """Challenge enrolment and progress tracking"""

    def __init__(self, db: Session):
        self.db = db
        self.loyalty_service = LoyaltyService(db)

    def get_available_challenges(
        self, user_tier: str, at: Optional[datetime] = None
    ) -> List[Challenge]:
        """Active challenges open to ``user_tier`` whose window contains ``at``"""
        at = at or utcnow()
        return (
            self.db.query(Challenge)
            .filter(
                Challenge.is_active.is_(True),
                Challenge.minimum_tier.in_(tiers_at_or_below(user_tier)),
                Challenge.start_date <= at,
                Challenge.end_date >= at,
            )
            .order_by(Challenge.end_date, Challenge.id)
            .all()
        )

    def get_active_user_challenges(self, user_id: int) -> List[Tuple[Challenge, UserChallenge]]:
        """Uncompleted enrolments in active challenges"""
        rows = (
            self.db.query(Challenge, UserChallenge)
            .join(UserChallenge, UserChallenge.challenge_id == Challenge.id)
            .filter(
                UserChallenge.user_id == user_id,
                UserChallenge.completed.is_(False),
                Challenge.is_active.is_(True),
            )
            .order_by(Challenge.end_date, Challenge.id)
            .all()
        )
        return [(challenge, progress) for challenge, progress in rows]

    def enroll(self, user_id: int, challenge_id: int) -> UserChallenge:
        """
        Enrol a user in a challenge. Returns the existing row if already enrolled.

        Raises:
            NotFoundError: If the user or an active challenge doesn't exist
            AuthorizationError: If the challenge requires a higher tier
            APIValidationError: If the challenge window is not open
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)

        challenge = (
            self.db.query(Challenge)
            .filter(Challenge.id == challenge_id, Challenge.is_active.is_(True))
            .first()
        )
        if not challenge:
            raise NotFoundError("Challenge", challenge_id)

        existing = self._get_user_challenge(user_id, challenge_id)
        if existing:
            return existing

        if tier_rank(user.reward_tier) < tier_rank(challenge.minimum_tier):
            raise AuthorizationError(
                f"Challenge requires {challenge.minimum_tier} tier or above",
                details={
                    "current_tier": user.reward_tier,
                    "minimum_tier": challenge.minimum_tier,
                },
            )

        if not challenge.is_running():
            raise APIValidationError("Challenge is not currently running")

        user_challenge = UserChallenge(
            user_id=user_id,
            challenge_id=challenge_id,
            current_count=0,
            completed=False,
        )
        try:
            self.db.add(user_challenge)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user_challenge)
        logger.info(f"User {user_id} enrolled in challenge {challenge_id}")
        return user_challenge

    @with_deadlock_retry()
    def update_user_challenge_progress(self, user_id: int, challenge_id: int) -> UserChallenge:
        """
        Advance a user's challenge counter by one.

        Completion sets ``completed``/``completed_at`` and awards the
        challenge points in the same transaction. Once completed the row is
        returned unchanged.

        Raises:
            NotFoundError: If the challenge or the enrolment doesn't exist
        """
        try:
            challenge = self.db.query(Challenge).filter(Challenge.id == challenge_id).first()
            if not challenge:
                raise NotFoundError("Challenge", challenge_id)

            user_challenge = self._get_user_challenge(user_id, challenge_id, lock=True)
            if not user_challenge:
                raise NotFoundError("UserChallenge", f"{user_id}/{challenge_id}")

            if user_challenge.completed:
                self.db.rollback()
                return user_challenge

            user_challenge.current_count += 1

            if user_challenge.current_count >= challenge.target_count:
                user_challenge.completed = True
                user_challenge.completed_at = utcnow()
                self.loyalty_service.record_activity(
                    user_id,
                    LoyaltyAction.CHALLENGE_COMPLETED,
                    challenge.points,
                    description=f"Completed challenge: {challenge.name}",
                )
                logger.info(
                    f"User {user_id} completed challenge {challenge_id}, "
                    f"awarded {challenge.points} points"
                )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user_challenge)
        return user_challenge

    def _get_user_challenge(
        self, user_id: int, challenge_id: int, lock: bool = False
    ) -> Optional[UserChallenge]:
        query = self.db.query(UserChallenge).filter(
            UserChallenge.user_id == user_id,
            UserChallenge.challenge_id == challenge_id,
        )
        if lock:
            query = query.with_for_update()
        return query.first()
