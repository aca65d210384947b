"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and the application context.
"""

from app.config import Settings, get_settings
from app.exceptions import (
    KitchenGuideError,
    ServiceValidationError,
    NotFoundError,
    ConflictError,
    UnsupportedMediaTypeError,
    PayloadTooLargeError,
    StorageUnavailableError,
    AuthenticationFailedError,
    PoolTimeoutError,
)

__all__ = [
    "Settings",
    "get_settings",
    "KitchenGuideError",
    "ServiceValidationError",
    "NotFoundError",
    "ConflictError",
    "UnsupportedMediaTypeError",
    "PayloadTooLargeError",
    "StorageUnavailableError",
    "AuthenticationFailedError",
    "PoolTimeoutError",
]
