"""API routes package"""

from . import products, preparations, auth, search, health

__all__ = ["products", "preparations", "auth", "search", "health"]
