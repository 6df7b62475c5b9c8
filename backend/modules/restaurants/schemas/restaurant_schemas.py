from pydantic import BaseModel
from typing import Optional


class RestaurantOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    address: str
    phone: Optional[str] = None
    image_url: Optional[str] = None
    cuisine_types: Optional[str] = None
    price_for_two: Optional[float] = None
    rating: Optional[float] = None
    delivery_time: int
    is_open: bool

    class Config:
        from_attributes = True


class MenuItemOut(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    is_veg: bool
    is_available: bool

    class Config:
        from_attributes = True
