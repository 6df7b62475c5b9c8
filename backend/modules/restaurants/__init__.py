"""Restaurants and their menus (read-only within the ordering core)."""
