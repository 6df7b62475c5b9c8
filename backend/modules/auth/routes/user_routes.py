"""
User directory routes: the caller's profile and the delivery partner list
used by restaurant admins when assigning orders.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from core.database import get_db
from core.auth import get_current_user, require_roles
from core.error_handling import handle_api_errors

from ..enums.user_enums import UserRole
from ..models.user_models import User
from ..schemas.user_schemas import UserProfile, DeliveryPartnerOut

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=UserProfile)
@handle_api_errors
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the caller's profile including loyalty fields."""
    return current_user


@router.get("/delivery-partners", response_model=List[DeliveryPartnerOut])
@handle_api_errors
async def list_delivery_partners(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.RESTAURANT_ADMIN)),
):
    """List delivery partners available for assignment."""
    return (
        db.query(User)
        .filter(User.role == UserRole.DELIVERY_PARTNER.value)
        .order_by(User.id)
        .all()
    )
