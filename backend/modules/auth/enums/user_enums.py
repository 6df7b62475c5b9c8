from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    RESTAURANT_ADMIN = "restaurant_admin"
    DELIVERY_PARTNER = "delivery_partner"
