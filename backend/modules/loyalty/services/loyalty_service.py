# backend/modules/loyalty/services/loyalty_service.py

"""
Loyalty points ledger.

``loyalty_activities`` is the source of truth for a user's balance; the
``loyalty_points``/``reward_tier`` columns on the user row are a projection
maintained in the same transaction as every ledger append.
"""

from sqlalchemy.orm import Session
from sqlalchemy import func, desc
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, timedelta
import logging

from ..enums.loyalty_enums import RewardTier, LoyaltyAction
from ..models.loyalty_models import LoyaltyActivity
from modules.auth.models.user_models import User
from core.error_handling import NotFoundError, InsufficientPointsError
from core.database_retry import with_deadlock_retry
from core.mixins import utcnow

logger = logging.getLogger(__name__)

# Cumulative points required for each tier, highest first
TIER_THRESHOLDS: Tuple[Tuple[RewardTier, int], ...] = (
    (RewardTier.PLATINUM, 5000),
    (RewardTier.GOLD, 1500),
    (RewardTier.SILVER, 500),
    (RewardTier.BRONZE, 0),
)

TIER_RANKS: Dict[RewardTier, int] = {
    RewardTier.BRONZE: 0,
    RewardTier.SILVER: 1,
    RewardTier.GOLD: 2,
    RewardTier.PLATINUM: 3,
}


def calculate_tier(points: int) -> RewardTier:
    """Highest tier whose threshold is <= points."""
    for tier, minimum in TIER_THRESHOLDS:
        if points >= minimum:
            return tier
    return RewardTier.BRONZE


def tier_rank(tier) -> int:
    return TIER_RANKS[RewardTier(tier)]


def tiers_at_or_below(tier) -> List[str]:
    """Tier values a holder of ``tier`` is eligible for."""
    rank = tier_rank(tier)
    return [t.value for t, r in TIER_RANKS.items() if r <= rank]


def next_streak_count(last_order_date: Optional[datetime], streak_count: int,
                      now: datetime) -> int:
    if last_order_date is None:
        return 1
    last_day = last_order_date.date()
    today = now.date()
    if last_day == today:
        return streak_count or 1
    if last_day == today - timedelta(days=1):
        return streak_count + 1
    return 1


class LoyaltyService:
    """Service for the points ledger and its cached projection"""

    def __init__(self, db: Session):
        self.db = db

    def _lock_user(self, user_id: int) -> User:
        user = (
            self.db.query(User)
            .filter(User.id == user_id)
            .with_for_update()
            .first()
        )
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def record_activity(
        self,
        user_id: int,
        action: LoyaltyAction,
        points: int,
        description: Optional[str] = None,
        order_id: Optional[int] = None,
    ) -> LoyaltyActivity:
        """
        Append a ledger entry and update the user's balance and tier.

        Runs inside the caller's transaction and does not commit, so it can
        be combined with other writes (reward redemption, challenge
        completion) in one atomic unit.

        Raises:
            NotFoundError: If the user doesn't exist
            InsufficientPointsError: If the balance would become negative
        """
        action = LoyaltyAction(action)
        user = self._lock_user(user_id)

        current_balance = user.loyalty_points or 0
        new_balance = current_balance + points
        if new_balance < 0:
            raise InsufficientPointsError(balance=current_balance, required=-points)

        activity = LoyaltyActivity(
            user_id=user_id,
            action=action.value,
            points=points,
            description=description,
            order_id=order_id,
        )
        self.db.add(activity)

        previous_tier = user.reward_tier
        new_tier = calculate_tier(new_balance).value
        user.loyalty_points = new_balance
        user.reward_tier = new_tier

        if action == LoyaltyAction.PLACE_ORDER:
            now = utcnow()
            user.streak_count = next_streak_count(
                user.last_order_date, user.streak_count or 0, now
            )
            user.last_order_date = now

        self.db.flush()

        logger.info(
            f"Loyalty activity for user {user_id}: {action.value} {points:+d} points, "
            f"balance {current_balance} -> {new_balance}"
        )
        if previous_tier != new_tier:
            logger.info(f"User {user_id} tier changed from {previous_tier} to {new_tier}")

        return activity

    @with_deadlock_retry()
    def add_loyalty_points(
        self,
        user_id: int,
        action: LoyaltyAction,
        points: int,
        description: Optional[str] = None,
        order_id: Optional[int] = None,
    ) -> LoyaltyActivity:
        """Append a ledger entry as its own transaction."""
        try:
            activity = self.record_activity(
                user_id, action, points, description=description, order_id=order_id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(activity)
        return activity

    def get_points_summary(self, user_id: int) -> Dict[str, Any]:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)

        return {
            "points": user.loyalty_points,
            "tier": user.reward_tier,
            "streak_count": user.streak_count,
        }

    def get_activities(self, user_id: int, limit: Optional[int] = None) -> List[LoyaltyActivity]:
        """Ledger entries for a user, most recent first"""
        query = (
            self.db.query(LoyaltyActivity)
            .filter(LoyaltyActivity.user_id == user_id)
            .order_by(desc(LoyaltyActivity.created_at), desc(LoyaltyActivity.id))
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_ledger_balance(self, user_id: int) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(LoyaltyActivity.points), 0))
            .filter(LoyaltyActivity.user_id == user_id)
            .scalar()
        )
        return int(total)

    @with_deadlock_retry()
    def reconcile_balance(self, user_id: int) -> Dict[str, Any]:
        """
        Rebuild the cached balance and tier from the ledger sum.

        Returns the balances before and after so drift can be reported.
        """
        try:
            user = self._lock_user(user_id)
            cached_balance = user.loyalty_points or 0
            ledger_balance = self.get_ledger_balance(user_id)
            drift = ledger_balance - cached_balance

            user.loyalty_points = ledger_balance
            user.reward_tier = calculate_tier(ledger_balance).value
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if drift:
            logger.warning(
                f"Loyalty balance drift for user {user_id}: cached {cached_balance}, "
                f"ledger {ledger_balance}"
            )

        return {
            "user_id": user_id,
            "cached_balance": cached_balance,
            "ledger_balance": ledger_balance,
            "drift": drift,
            "tier": user.reward_tier,
        }
