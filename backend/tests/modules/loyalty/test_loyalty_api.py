# backend/tests/modules/loyalty/test_loyalty_api.py

"""
HTTP tests for the loyalty, rewards and challenge endpoints.
"""

import asyncio
import time
from unittest.mock import Mock

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from app.main import app
from core.config import settings
from modules.loyalty.services.loyalty_service import LoyaltyService
from modules.loyalty.enums.loyalty_enums import LoyaltyAction
from tests.factories import UserFactory, RewardFactory, ChallengeFactory


@pytest.fixture
def member(db_session):
    user = UserFactory()
    LoyaltyService(db_session).add_loyalty_points(user.id, LoyaltyAction.SIGN_UP, 600)
    return user


@pytest.mark.integration
class TestLoyaltyEndpoints:

    def test_points_summary(self, client, auth_headers, member):
        response = client.get("/api/v1/loyalty/points", headers=auth_headers(member))

        assert response.status_code == 200
        assert response.json() == {"points": 600, "tier": "silver", "streak_count": 0}

    def test_activities(self, client, auth_headers, member):
        response = client.get("/api/v1/loyalty/activities", headers=auth_headers(member))

        assert response.status_code == 200
        [entry] = response.json()
        assert entry["action"] == "sign_up"
        assert entry["points"] == 600

    def test_reconcile(self, client, auth_headers, member, db_session):
        member.loyalty_points = 0
        db_session.commit()

        response = client.post("/api/v1/loyalty/reconcile", headers=auth_headers(member))

        assert response.status_code == 200
        assert response.json()["drift"] == 600
        assert response.json()["tier"] == "silver"

    def test_requires_authentication(self, client, db_session):
        response = client.get("/api/v1/loyalty/points")

        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "NOT_AUTHENTICATED"


@pytest.mark.integration
class TestRewardEndpoints:

    def test_list_rewards_for_tier(self, client, auth_headers, member):
        visible = RewardFactory(minimum_tier="silver")
        RewardFactory(minimum_tier="gold")

        response = client.get("/api/v1/rewards", headers=auth_headers(member))

        assert [r["id"] for r in response.json()] == [visible.id]

    def test_redeem_then_verify(self, client, auth_headers, member):
        headers = auth_headers(member)
        reward = RewardFactory(points_cost=500)

        response = client.post(f"/api/v1/rewards/{reward.id}/redeem", headers=headers)
        assert response.status_code == 201
        code = response.json()["code"]

        points = client.get("/api/v1/loyalty/points", headers=headers).json()
        assert points["points"] == 100
        assert points["tier"] == "bronze"

        response = client.post(
            "/api/v1/rewards/verify", json={"code": code.lower()}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["reward"]["id"] == reward.id

        user_rewards = client.get("/api/v1/user-rewards", headers=headers).json()
        assert [r["code"] for r in user_rewards] == [code]

    def test_redeem_with_insufficient_points(self, client, auth_headers, member):
        reward = RewardFactory(points_cost=1000)

        response = client.post(
            f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers(member)
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INSUFFICIENT_POINTS"

    def test_redeem_above_tier(self, client, auth_headers, member):
        reward = RewardFactory(points_cost=100, minimum_tier="platinum")

        response = client.post(
            f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers(member)
        )

        assert response.status_code == 403

    def test_verify_unknown_code(self, client, auth_headers, member):
        response = client.post(
            "/api/v1/rewards/verify", json={"code": "NOPE1234"}, headers=auth_headers(member)
        )

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "NOT_FOUND"


@pytest.mark.integration
class TestChallengeEndpoints:

    def test_enroll_progress_and_complete(self, client, auth_headers, member):
        headers = auth_headers(member)
        challenge = ChallengeFactory(target_count=2, points=1000)

        listed = client.get("/api/v1/challenges", headers=headers).json()
        assert [c["id"] for c in listed] == [challenge.id]

        response = client.post(f"/api/v1/challenges/{challenge.id}/enroll", headers=headers)
        assert response.status_code == 201

        active = client.get("/api/v1/user-challenges", headers=headers).json()
        assert active[0]["progress"]["current_count"] == 0
        assert active[0]["challenge"]["id"] == challenge.id

        client.post(f"/api/v1/challenges/{challenge.id}/progress", headers=headers)
        response = client.post(f"/api/v1/challenges/{challenge.id}/progress", headers=headers)
        assert response.json()["completed"] is True

        points = client.get("/api/v1/loyalty/points", headers=headers).json()
        assert points == {"points": 1600, "tier": "gold", "streak_count": 0}
        assert client.get("/api/v1/user-challenges", headers=headers).json() == []

    def test_progress_without_enrolment(self, client, auth_headers, member):
        challenge = ChallengeFactory()

        response = client.post(
            f"/api/v1/challenges/{challenge.id}/progress", headers=auth_headers(member)
        )

        assert response.status_code == 404


def _deadlock():
    pg_error = Mock()
    pg_error.pgcode = "40P01"
    return OperationalError("deadlock detected", None, pg_error)


@pytest.mark.integration
class TestRetryBackoffConcurrency:

    async def test_backoff_does_not_stall_event_loop(self, client, auth_headers, member, monkeypatch):
        reward = RewardFactory(points_cost=100)
        original = LoyaltyService.record_activity
        attempts = []

        def deadlock_once(self, *args, **kwargs):
            attempts.append(1)
            if len(attempts) == 1:
                raise _deadlock()
            return original(self, *args, **kwargs)

        monkeypatch.setattr(settings, "db_retry_initial_delay", 0.3)
        monkeypatch.setattr(LoyaltyService, "record_activity", deadlock_once)

        gaps = []
        stop = asyncio.Event()

        async def ticker():
            last = time.perf_counter()
            while not stop.is_set():
                await asyncio.sleep(0.01)
                now = time.perf_counter()
                gaps.append(now - last)
                last = now

        ticking = asyncio.create_task(ticker())
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            response = await http.post(
                f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers(member)
            )
        stop.set()
        await ticking

        assert response.status_code == 201
        assert len(attempts) == 2
        assert max(gaps) < 0.2
