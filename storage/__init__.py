"""Storage adapter package."""

from storage.base import StorageAdapter, StorageFile, StorageFolder
from storage.exceptions import (
    FolderAlreadyRegisteredError,
    InsufficientPrivilegesError,
    StorageAuthError,
    StorageBackendError,
    StorageError,
    StorageNotFoundError,
    StorageRepairError,
    StorageUnavailableError,
    UnsupportedDriveTypeError,
)
from storage.registry import AdapterRegistry, create_registry

__all__ = [
    "AdapterRegistry",
    "create_registry",
    "StorageAdapter",
    "StorageFile",
    "StorageFolder",
    "StorageError",
    "StorageNotFoundError",
    "InsufficientPrivilegesError",
    "StorageBackendError",
    "StorageUnavailableError",
    "StorageAuthError",
    "UnsupportedDriveTypeError",
    "FolderAlreadyRegisteredError",
    "StorageRepairError",
]
