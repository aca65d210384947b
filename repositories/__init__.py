"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.product_repository import ProductRepository
from repositories.preparation_repository import (
    PreparationRepository,
    PreparationStepRepository,
)
from repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "PreparationRepository",
    "PreparationStepRepository",
    "UserRepository",
]
