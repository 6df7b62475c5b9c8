from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from ..enums.order_enums import OrderStatus


class OrderCreate(BaseModel):
    delivery_address: str = Field(..., min_length=1, max_length=500)

    @field_validator("delivery_address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("delivery_address must not be blank")
        return v.strip()


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    delivery_partner_id: Optional[int] = None


class DeliveryPartnerAssignment(BaseModel):
    delivery_partner_id: int


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    menu_item_id: int
    quantity: int
    price: float

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    customer_id: int
    restaurant_id: int
    status: OrderStatus
    subtotal: float
    delivery_fee: float
    tax: float
    discount: float
    amount: float
    delivery_address: str
    delivery_partner_id: Optional[int] = None
    estimated_delivery_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    order_items: List[OrderItemOut] = []

    class Config:
        from_attributes = True
