# backend/tests/modules/loyalty/test_loyalty_ledger.py

"""
Tests for the points ledger, tier projection and order streaks.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from modules.loyalty.services.loyalty_service import (
    LoyaltyService, calculate_tier, tiers_at_or_below, next_streak_count
)
from modules.loyalty.enums.loyalty_enums import RewardTier, LoyaltyAction
from modules.loyalty.models.loyalty_models import LoyaltyActivity
from core.error_handling import NotFoundError, InsufficientPointsError
from tests.factories import UserFactory


@pytest.mark.unit
class TestTierCalculation:

    @pytest.mark.parametrize("points,tier", [
        (0, RewardTier.BRONZE),
        (499, RewardTier.BRONZE),
        (500, RewardTier.SILVER),
        (1499, RewardTier.SILVER),
        (1500, RewardTier.GOLD),
        (4999, RewardTier.GOLD),
        (5000, RewardTier.PLATINUM),
        (250000, RewardTier.PLATINUM),
    ])
    def test_threshold_boundaries(self, points, tier):
        assert calculate_tier(points) == tier

    def test_tier_is_monotonic(self):
        ranks = [list(RewardTier).index(calculate_tier(p)) for p in range(0, 6001, 50)]
        assert ranks == sorted(ranks)

    def test_tiers_at_or_below(self):
        assert tiers_at_or_below("bronze") == ["bronze"]
        assert tiers_at_or_below(RewardTier.GOLD) == ["bronze", "silver", "gold"]


@pytest.mark.unit
class TestStreakCounting:
    NOW = datetime(2026, 3, 10, 12, 0)

    def test_first_order_starts_streak(self):
        assert next_streak_count(None, 0, self.NOW) == 1

    def test_consecutive_day_extends_streak(self):
        assert next_streak_count(self.NOW - timedelta(days=1), 4, self.NOW) == 5

    def test_same_day_keeps_streak(self):
        assert next_streak_count(self.NOW - timedelta(hours=2), 4, self.NOW) == 4

    def test_gap_resets_streak(self):
        assert next_streak_count(self.NOW - timedelta(days=3), 4, self.NOW) == 1


class TestLoyaltyLedger:

    @pytest.fixture
    def service(self, db_session):
        return LoyaltyService(db_session)

    def test_award_appends_activity_and_updates_balance(self, service, db_session):
        user = UserFactory()

        activity = service.add_loyalty_points(
            user.id, LoyaltyAction.SIGN_UP, 100, description="Welcome bonus"
        )

        db_session.refresh(user)
        assert activity.id is not None
        assert activity.action == "sign_up"
        assert user.loyalty_points == 100
        assert user.reward_tier == "bronze"

    def test_balance_equals_ledger_sum(self, service, db_session):
        user = UserFactory()

        service.add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 100)
        service.add_loyalty_points(user.id, LoyaltyAction.REVIEW, 450)
        service.add_loyalty_points(user.id, LoyaltyAction.REWARD_REDEEMED, -300)

        db_session.refresh(user)
        assert user.loyalty_points == 250
        assert service.get_ledger_balance(user.id) == 250
        assert user.reward_tier == "bronze"

    def test_crossing_threshold_upgrades_tier(self, service, db_session):
        user = UserFactory()

        service.add_loyalty_points(user.id, LoyaltyAction.PLACE_ORDER, 1875)

        db_session.refresh(user)
        assert user.reward_tier == "gold"

    def test_tier_follows_balance_down(self, service, db_session):
        user = UserFactory()
        service.add_loyalty_points(user.id, LoyaltyAction.REFERRAL, 600)

        service.add_loyalty_points(user.id, LoyaltyAction.REWARD_REDEEMED, -200)

        db_session.refresh(user)
        assert user.reward_tier == "bronze"

    def test_negative_balance_is_rejected(self, service, db_session):
        user = UserFactory()
        service.add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 50)

        with pytest.raises(InsufficientPointsError):
            service.add_loyalty_points(user.id, LoyaltyAction.REWARD_REDEEMED, -100)

        db_session.refresh(user)
        assert user.loyalty_points == 50
        assert db_session.query(LoyaltyActivity).filter_by(user_id=user.id).count() == 1

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.add_loyalty_points(999, LoyaltyAction.SIGN_UP, 10)

    def test_unknown_action_is_rejected(self, service):
        user = UserFactory()

        with pytest.raises(ValueError):
            service.add_loyalty_points(user.id, "lottery_win", 10)

    def test_place_order_updates_streak(self, service, db_session):
        user = UserFactory(
            streak_count=2,
            last_order_date=datetime.utcnow() - timedelta(days=1),
        )

        service.add_loyalty_points(user.id, LoyaltyAction.PLACE_ORDER, 10)

        db_session.refresh(user)
        assert user.streak_count == 3
        assert user.last_order_date.date() == datetime.utcnow().date()

    def test_other_actions_leave_streak_alone(self, service, db_session):
        user = UserFactory(streak_count=2)

        service.add_loyalty_points(user.id, LoyaltyAction.BIRTHDAY, 10)

        db_session.refresh(user)
        assert user.streak_count == 2
        assert user.last_order_date is None

    def test_points_summary(self, service):
        user = UserFactory(loyalty_points=700, reward_tier="silver", streak_count=4)

        assert service.get_points_summary(user.id) == {
            "points": 700,
            "tier": "silver",
            "streak_count": 4,
        }

    def test_activities_most_recent_first(self, service):
        user = UserFactory()
        for points in (10, 20, 30):
            service.add_loyalty_points(user.id, LoyaltyAction.REVIEW, points)

        activities = service.get_activities(user.id)

        assert [a.points for a in activities] == [30, 20, 10]
        assert [a.points for a in service.get_activities(user.id, limit=2)] == [30, 20]

    def test_reconcile_corrects_drift(self, service, db_session, caplog):
        user = UserFactory()
        service.add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 600)
        user.loyalty_points = 20
        user.reward_tier = "bronze"
        db_session.commit()

        result = service.reconcile_balance(user.id)

        db_session.refresh(user)
        assert result == {
            "user_id": user.id,
            "cached_balance": 20,
            "ledger_balance": 600,
            "drift": 580,
            "tier": "silver",
        }
        assert user.loyalty_points == 600
        assert "drift" in caplog.text

    def test_reconcile_without_drift(self, service):
        user = UserFactory()
        service.add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 100)

        assert service.reconcile_balance(user.id)["drift"] == 0

    def test_failed_tier_update_leaves_no_activity(self, service, db_session):
        user = UserFactory()
        service.add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 100)

        with patch(
            "modules.loyalty.services.loyalty_service.calculate_tier",
            side_effect=RuntimeError("tier lookup failed"),
        ):
            with pytest.raises(RuntimeError):
                service.add_loyalty_points(user.id, LoyaltyAction.REVIEW, 450)

        db_session.refresh(user)
        assert user.loyalty_points == 100
        assert user.reward_tier == "bronze"
        assert db_session.query(LoyaltyActivity).filter_by(user_id=user.id).count() == 1
        assert service.get_ledger_balance(user.id) == 100
