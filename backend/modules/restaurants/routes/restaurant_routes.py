# backend/modules/restaurants/routes/restaurant_routes.py

"""
Public, read-only restaurant and menu browsing.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional

from core.database import get_db
from core.error_handling import handle_api_errors, NotFoundError

from ..models.restaurant_models import Restaurant, MenuItem
from ..schemas.restaurant_schemas import RestaurantOut, MenuItemOut

router = APIRouter(prefix="/api/v1/restaurants", tags=["Restaurants"])


def _get_restaurant(db: Session, restaurant_id: int) -> Restaurant:
    restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
    if not restaurant:
        raise NotFoundError("Restaurant", restaurant_id)
    return restaurant


@router.get("", response_model=List[RestaurantOut])
@handle_api_errors
async def list_restaurants(
    query: Optional[str] = Query(None, description="Search name or cuisine"),
    open_only: bool = Query(True, description="Only restaurants accepting orders"),
    db: Session = Depends(get_db),
):
    """List restaurants, optionally filtered by a case-insensitive search."""
    restaurants = db.query(Restaurant)
    if open_only:
        restaurants = restaurants.filter(Restaurant.is_open.is_(True))
    if query and query.strip():
        pattern = f"%{query.strip()}%"
        restaurants = restaurants.filter(
            or_(Restaurant.name.ilike(pattern), Restaurant.cuisine_types.ilike(pattern))
        )
    return restaurants.order_by(Restaurant.name, Restaurant.id).all()


@router.get("/{restaurant_id}", response_model=RestaurantOut)
@handle_api_errors
async def get_restaurant(restaurant_id: int, db: Session = Depends(get_db)):
    return _get_restaurant(db, restaurant_id)


@router.get("/{restaurant_id}/menu", response_model=List[MenuItemOut])
@handle_api_errors
async def get_restaurant_menu(
    restaurant_id: int,
    available_only: bool = Query(True, description="Hide items that cannot be ordered"),
    db: Session = Depends(get_db),
):
    """
    Menu items of a restaurant. Item ids are what the cart accepts.

    Raises:
        404: Restaurant not found
    """
    _get_restaurant(db, restaurant_id)
    items = db.query(MenuItem).filter(MenuItem.restaurant_id == restaurant_id)
    if available_only:
        items = items.filter(MenuItem.is_available.is_(True))
    return items.order_by(MenuItem.name, MenuItem.id).all()
