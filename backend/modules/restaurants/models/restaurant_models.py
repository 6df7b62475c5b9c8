# backend/modules/restaurants/models/restaurant_models.py

from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric, Text,
                        Boolean, CheckConstraint)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin


class Restaurant(Base, TimestampMixin):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=False)
    phone = Column(String(30), nullable=True)
    image_url = Column(String(500), nullable=True)
    cuisine_types = Column(String(300), nullable=True)  # comma separated
    price_for_two = Column(Numeric(10, 2), nullable=True)
    rating = Column(Numeric(3, 1), nullable=True)
    delivery_time = Column(Integer, nullable=False, default=30)  # minutes
    is_open = Column(Boolean, nullable=False, default=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    owner = relationship("User", back_populates="restaurants")
    menu_items = relationship("MenuItem", back_populates="restaurant")
    orders = relationship("Order", back_populates="restaurant")

    __table_args__ = (
        CheckConstraint('delivery_time >= 0', name='delivery_time_non_negative'),
    )

    def __repr__(self):
        return f"<Restaurant(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"


class MenuItem(Base, TimestampMixin):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    is_veg = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=True)

    restaurant = relationship("Restaurant", back_populates="menu_items")

    __table_args__ = (
        CheckConstraint('price >= 0', name='menu_item_price_non_negative'),
    )

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
