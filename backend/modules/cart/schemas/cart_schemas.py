from pydantic import BaseModel, Field
from typing import List, Optional


class CartItemAdd(BaseModel):
    menu_item_id: int
    quantity: int = Field(1, gt=0)


class CartItemUpdate(BaseModel):
    quantity: int


class CartLineOut(BaseModel):
    menu_item_id: int
    name: str
    price: float
    quantity: int
    restaurant_id: int
    is_veg: bool

    class Config:
        from_attributes = True


class CartOut(BaseModel):
    items: List[CartLineOut]
    restaurant_id: Optional[int] = None


class CartSummary(BaseModel):
    item_count: int
    subtotal: float
    delivery_fee: float
    tax: float
    discount: float
    total: float
