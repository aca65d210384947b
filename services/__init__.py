"""Services package - Business logic layer"""

from services.auth_service import AuthService, hash_password, verify_password
from services.product_service import ProductService
from services.preparation_service import PreparationService, StepDraft

# Note: search_service contains utility functions, not a class

__all__ = [
    "AuthService",
    "hash_password",
    "verify_password",
    "ProductService",
    "PreparationService",
    "StepDraft",
]
