# backend/modules/loyalty/services/rewards_engine.py

"""
Rewards catalog visibility, point redemption and code verification.
"""

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc
from typing import List, Optional
from datetime import timedelta
import logging
import secrets
import string

from ..enums.loyalty_enums import LoyaltyAction
from ..models.rewards_models import Reward, UserReward
from .loyalty_service import LoyaltyService, tier_rank, tiers_at_or_below
from modules.auth.models.user_models import User
from core.error_handling import (
    NotFoundError, AuthorizationError, InsufficientPointsError
)
from core.database_retry import with_deadlock_retry
from core.mixins import utcnow

logger = logging.getLogger(__name__)

CODE_LENGTH = 8
CODE_ALPHABET = string.ascii_uppercase + string.digits


class RewardsEngine:
    """Engine for redeeming points into reward codes"""

    def __init__(self, db: Session):
        self.db = db
        self.loyalty_service = LoyaltyService(db)

    def get_rewards_by_tier(self, user_tier: str) -> List[Reward]:
        """Active rewards whose minimum tier is at or below ``user_tier``"""
        return (
            self.db.query(Reward)
            .filter(
                Reward.is_active.is_(True),
                Reward.minimum_tier.in_(tiers_at_or_below(user_tier)),
            )
            .order_by(Reward.points_cost, Reward.id)
            .all()
        )

    def get_user_rewards(self, user_id: int) -> List[UserReward]:
        return (
            self.db.query(UserReward)
            .options(joinedload(UserReward.reward))
            .filter(UserReward.user_id == user_id)
            .order_by(desc(UserReward.created_at), desc(UserReward.id))
            .all()
        )

    @with_deadlock_retry()
    def redeem_reward(self, user_id: int, reward_id: int) -> UserReward:
        """
        Spend points on a reward and issue a unique usage code.

        The UserReward insert, the balance deduction and the negative ledger
        entry commit together. The user row is locked for the duration so
        concurrent redemptions are serialized per user.

        Raises:
            NotFoundError: If the user or an active reward doesn't exist
            AuthorizationError: If the reward requires a higher tier
            InsufficientPointsError: If the balance is below the cost
        """
        try:
            user = (
                self.db.query(User)
                .filter(User.id == user_id)
                .with_for_update()
                .first()
            )
            if not user:
                raise NotFoundError("User", user_id)

            reward = (
                self.db.query(Reward)
                .filter(Reward.id == reward_id, Reward.is_active.is_(True))
                .first()
            )
            if not reward:
                raise NotFoundError("Reward", reward_id)

            if tier_rank(user.reward_tier) < tier_rank(reward.minimum_tier):
                raise AuthorizationError(
                    f"Reward requires {reward.minimum_tier} tier or above",
                    details={
                        "current_tier": user.reward_tier,
                        "minimum_tier": reward.minimum_tier,
                    },
                )

            if user.loyalty_points < reward.points_cost:
                raise InsufficientPointsError(
                    balance=user.loyalty_points, required=reward.points_cost
                )

            expires_at = None
            if reward.valid_for_days:
                expires_at = utcnow() + timedelta(days=reward.valid_for_days)

            user_reward = UserReward(
                user_id=user_id,
                reward_id=reward.id,
                code=self._generate_reward_code(),
                redeemed=False,
                expires_at=expires_at,
            )
            self.db.add(user_reward)

            self.loyalty_service.record_activity(
                user_id,
                LoyaltyAction.REWARD_REDEEMED,
                -reward.points_cost,
                description=f"Redeemed reward: {reward.name}",
            )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user_reward)
        logger.info(
            f"User {user_id} redeemed reward {reward_id} for {reward.points_cost} points, "
            f"code {user_reward.code}"
        )
        return user_reward

    def verify_reward_code(self, code: str) -> Optional[UserReward]:
        """
        Look up an unredeemed, unexpired code.

        Returns None when the code is unknown, already redeemed or expired.
        Verification does not consume the code.
        """
        user_reward = (
            self.db.query(UserReward)
            .options(joinedload(UserReward.reward))
            .filter(UserReward.code == code)
            .first()
        )
        if not user_reward or not user_reward.is_usable:
            return None
        return user_reward

    def _generate_reward_code(self) -> str:
        """Generate unique reward code"""
        while True:
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            existing = (
                self.db.query(UserReward.id)
                .filter(UserReward.code == code)
                .first()
            )
            if not existing:
                return code
            logger.debug("Reward code collision, regenerating")
