from .restaurant_models import Restaurant, MenuItem

__all__ = ["Restaurant", "MenuItem"]
