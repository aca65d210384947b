"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    create_db_engine,
    create_session_factory,
    init_database,
)
from domain.models.catalog import Product, Preparation, PreparationStep
from domain.models.user import User

__all__ = [
    # Database
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_database",
    # Catalog models
    "Product",
    "Preparation",
    "PreparationStep",
    # User models
    "User",
]
