from sqlalchemy import (Column, Integer, String, ForeignKey, DateTime,
                        Numeric, Text, Index, CheckConstraint)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin
from ..enums.order_enums import OrderStatus


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"),
                         nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"),
                           nullable=False, index=True)
    status = Column(String(30), nullable=False, index=True,
                    default=OrderStatus.PLACED.value)

    # Pricing snapshot
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    amount = Column(Numeric(10, 2), nullable=False)

    delivery_address = Column(Text, nullable=False)
    delivery_partner_id = Column(Integer, ForeignKey("users.id"),
                                 nullable=True, index=True)
    estimated_delivery_time = Column(DateTime, nullable=True)

    order_items = relationship("OrderItem", back_populates="order",
                               order_by="OrderItem.id")
    customer = relationship("User", foreign_keys=[customer_id])
    delivery_partner = relationship("User", foreign_keys=[delivery_partner_id])
    restaurant = relationship("Restaurant", back_populates="orders")

    __table_args__ = (
        CheckConstraint('amount >= 0', name='order_amount_non_negative'),
        Index('ix_orders_restaurant_status', 'restaurant_id', 'status'),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, status='{self.status}', amount={self.amount})>"


class OrderItem(Base, TimestampMixin):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    # Unit price captured at order time
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="order_items")
    menu_item = relationship("MenuItem")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='order_item_quantity_positive'),
    )

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, menu_item_id={self.menu_item_id}, qty={self.quantity})>"
