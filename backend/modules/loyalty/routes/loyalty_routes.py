# backend/modules/loyalty/routes/loyalty_routes.py

"""
Routes for the caller's loyalty points and ledger.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from core.database import get_db
from core.auth import get_current_user
from core.error_handling import handle_api_errors
from modules.auth.models.user_models import User

from ..services.loyalty_service import LoyaltyService
from ..schemas.loyalty_schemas import (
    PointsSummary,
    LoyaltyActivityResponse,
    ReconciliationResult,
)

router = APIRouter(prefix="/api/v1/loyalty", tags=["Loyalty"])


@router.get("/points", response_model=PointsSummary)
@handle_api_errors
async def get_points(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the caller's points balance, tier and order streak.
    """
    return LoyaltyService(db).get_points_summary(current_user.id)


@router.get("/activities", response_model=List[LoyaltyActivityResponse])
@handle_api_errors
async def get_activities(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the caller's ledger entries, most recent first.
    """
    return LoyaltyService(db).get_activities(current_user.id, limit=limit)


@router.post("/reconcile", response_model=ReconciliationResult)
@handle_api_errors
def reconcile_points(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Rebuild the caller's cached balance and tier from the ledger.

    Returns:
        Cached and ledger balances with the drift that was corrected
    """
    return LoyaltyService(db).reconcile_balance(current_user.id)
