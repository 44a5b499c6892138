"""Shared utilities package for oidc-client"""

from .storage import FileStorage, MemoryStorage, Storage, StorageError

__all__ = [
    "FileStorage",
    "MemoryStorage",
    "Storage",
    "StorageError",
]
