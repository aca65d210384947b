"""
Adapters package - integrations with external stores.
"""

from adapters.storage_adapter import (
    BaseStorageBackend,
    LocalStorageBackend,
    S3StorageBackend,
    ImageUpload,
    build_storage_backend,
    install_placeholder,
)

__all__ = [
    "BaseStorageBackend",
    "LocalStorageBackend",
    "S3StorageBackend",
    "ImageUpload",
    "build_storage_backend",
    "install_placeholder",
]
